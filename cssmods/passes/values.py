# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
`@value` pass.

Definitions (`@value name: value;`) are substituted throughout the sheet and
exported. Imports (`@value a, b as c from "./file.css";`) become `:import`
rules whose local aliases (`i__const_<name>_<n>`) are later resolved by the
link pass; the aliases are also exported so importers can re-export them.
"""

from __future__ import annotations

import re
from typing import Dict, List, Tuple

from cssmods.errors import CssSyntaxError
from cssmods.parser.ast import Declaration, Root, Rule
from cssmods.passes.selectors import unquote
from cssmods.passes.symbols import replace_symbols, replace_value_symbols

_MATCH_IMPORTS = re.compile(r"^(.+?|\([\s\S]+?\))\s+from\s+(\"[^\"]*\"|'[^']*'|[\w-]+)$")
_MATCH_VALUE_DEFINITION = re.compile(r"^([\w-]+)\s*:?\s*([\s\S]*?)\s*$")
_MATCH_IMPORT = re.compile(r"^([\w-]+)(?:\s+as\s+([\w-]+))?$")


def import_alias(name: str, index: int) -> str:
	safe = re.sub(r"\W", "_", name)
	return f"i__const_{safe}_{index}"


def values(root: Root, result: object) -> None:
	definitions: Dict[str, str] = {}
	imports: Dict[str, List[Tuple[str, str]]] = {}
	import_index = 0

	for at in root.walk_at_rules("value"):
		params = at.params.strip()
		m = _MATCH_IMPORTS.match(params)
		if m is not None:
			names, path = m.group(1), m.group(2)
			if path in definitions:
				path = definitions[path]
			path = unquote(path)
			names = names.strip()
			if names.startswith("(") and names.endswith(")"):
				names = names[1:-1]
			for item in names.split(","):
				im = _MATCH_IMPORT.match(item.strip())
				if im is None:
					raise CssSyntaxError.at(f"@value statement \"{at.params}\" is invalid", at.source, reason_code="invalid-value")
				their_name = im.group(1)
				local_name = im.group(2) or their_name
				alias = import_alias(local_name, import_index)
				import_index += 1
				definitions[local_name] = alias
				imports.setdefault(path, []).append((their_name, alias))
			at.remove()
			continue

		d = _MATCH_VALUE_DEFINITION.match(params)
		if d is None or not d.group(2):
			raise CssSyntaxError.at(f"@value statement \"{at.params}\" is invalid", at.source, reason_code="invalid-value")
		definitions[d.group(1)] = replace_value_symbols(d.group(2), definitions)
		at.remove()

	if not definitions:
		return

	replace_symbols(root, definitions)

	export_rule = Rule(selector=":export")
	export_rule.raws.update({"before": "\n", "between": " ", "after": "\n"})
	for key, value in definitions.items():
		decl = Declaration(prop=key, value=value)
		decl.raws.update({"before": "\n  ", "between": ": "})
		export_rule.append(decl)
	root.append(export_rule)

	rules: List[Rule] = []
	for path, pairs in imports.items():
		rule = Rule(selector=f":import(\"{path}\")")
		rule.raws.update({"between": " ", "after": "\n"})
		for their_name, alias in pairs:
			decl = Declaration(prop=alias, value=their_name)
			decl.raws.update({"before": "\n  ", "between": ": "})
			rule.append(decl)
		rules.append(rule)
	if rules:
		root.prepend(*rules)


__all__ = ["import_alias", "values"]
