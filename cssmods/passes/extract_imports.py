# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Import extraction pass.

`composes: a b from "./x.css"` becomes `composes: i__imported_a_0
i__imported_b_1` plus an `:import("./x.css")` rule binding those aliases to
the remote names. `from global` composes are rewritten to `global(a)` so the
scope pass passes them through unscoped.
"""

from __future__ import annotations

import re
from typing import Dict, List

from cssmods.parser.ast import Declaration, Root, Rule
from cssmods.passes.selectors import unquote

COMPOSES_PROPS = ("composes", "compose-with")

_MATCH_IMPORTS = re.compile(r"^(.+?)\s+from\s+(\"[^\"]*\"|'[^']*'|global)$")


def imported_alias(name: str, index: int) -> str:
	safe = re.sub(r"\W", "_", name)
	return f"i__imported_{safe}_{index}"


def extract_imports(root: Root, result: object) -> None:
	imports: Dict[str, Dict[str, str]] = {}
	index = 0

	for decl in root.walk_decls():
		if decl.prop not in COMPOSES_PROPS:
			continue
		m = _MATCH_IMPORTS.match(decl.value.strip())
		if m is None:
			continue
		symbols = m.group(1).split()
		if m.group(2) == "global":
			decl.value = " ".join(f"global({name})" for name in symbols)
			continue
		bucket = imports.setdefault(unquote(m.group(2)), {})
		aliases: List[str] = []
		for name in symbols:
			alias = bucket.get(name)
			if alias is None:
				alias = imported_alias(name, index)
				index += 1
				bucket[name] = alias
			aliases.append(alias)
		decl.value = " ".join(aliases)

	rules: List[Rule] = []
	for path, bucket in imports.items():
		rule = Rule(selector=f":import(\"{path}\")")
		rule.raws.update({"between": " ", "after": "\n"})
		for name, alias in bucket.items():
			decl = Declaration(prop=alias, value=name)
			decl.raws.update({"before": "\n  ", "between": ": "})
			rule.append(decl)
		rules.append(rule)
	if rules:
		root.prepend(*rules)


__all__ = ["COMPOSES_PROPS", "extract_imports", "imported_alias"]
