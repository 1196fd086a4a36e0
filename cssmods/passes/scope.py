# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Scope pass.

Replaces every `:local(.name)` / `:local(#name)` / `:local(name)` (keyframes)
with a generated scoped name, folds `composes` declarations into the export
list of the composing class, and appends an `:export` rule mapping each local
name to its space-joined scoped names.

The name generator receives `(name, from_path, rule_text)` where `rule_text`
is the exact source of the declaring rule.
"""

from __future__ import annotations

import re
from typing import Callable, Dict, List, Optional

from cssmods.errors import CssSyntaxError
from cssmods.naming import generate_scoped_name
from cssmods.parser.ast import AtRule, Declaration, Node, Root, Rule
from cssmods.passes.extract_imports import COMPOSES_PROPS
from cssmods.passes.local_by_default import KEYFRAMES
from cssmods.passes.selectors import ICSS_IMPORT, NAME, is_icss_selector, matching_close, split_top_level

LocalNameGenerator = Callable[[str, str, str], str]

_SIMPLE_LOCAL_CLASS = re.compile(r"^:local\(\.([\w-]+)\)$")
_LOCAL_NAME = re.compile(r":local\(\s*([\w-]+)\s*\)")
_GLOBAL_REF = re.compile(r"^global\(([^)]+)\)$")


def _default_generator(name: str, path: str, rule_text: str) -> str:
	return generate_scoped_name(name, path, rule_text)


def scope(generate: Optional[LocalNameGenerator] = None):
	"""Build the scope pass around a `(name, from_path, rule_text)` generator."""
	gen = generate or _default_generator

	def _pass(root: Root, result: object) -> None:
		opts = getattr(result, "opts", {}) or {}
		from_path = opts.get("from") or (root.input.file if root.input is not None else None) or ""
		exports: Dict[str, List[str]] = {}
		simple_classes: Dict[int, Optional[List[str]]] = {}

		imported = set()
		for node in root.each():
			if isinstance(node, Rule) and ICSS_IMPORT.match(node.selector):
				for decl in node.each():
					if isinstance(decl, Declaration):
						imported.add(decl.prop)

		def export_scoped(name: str, node: Node) -> str:
			text = node.source_text()
			scoped = gen(name, from_path, text if text is not None else str(node))
			bucket = exports.setdefault(name, [])
			if scoped not in bucket:
				bucket.append(scoped)
			return scoped

		def scope_local(inner: str, node: Node) -> str:
			out: List[str] = []
			i = 0
			while i < len(inner):
				ch = inner[i]
				if ch in ".#":
					m = NAME.match(inner, i + 1)
					if m is not None:
						out.append(ch + export_scoped(m.group(0), node))
						i = m.end()
						continue
				out.append(ch)
				i += 1
			return "".join(out)

		def scope_selector(rule: Rule) -> str:
			text = rule.selector
			out: List[str] = []
			i = 0
			while i < len(text):
				if text.startswith(":local(", i):
					open_at = i + len(":local")
					close = matching_close(text, open_at, rule.source)
					out.append(scope_local(text[open_at + 1:close], rule))
					i = close + 1
					continue
				out.append(text[i])
				i += 1
			return "".join(out)

		for rule in root.walk_rules():
			if is_icss_selector(rule.selector):
				continue
			names: Optional[List[str]] = []
			for part in split_top_level(rule.selector, ","):
				m = _SIMPLE_LOCAL_CLASS.match(part.strip())
				if m is None:
					names = None
					break
				assert names is not None
				names.append(m.group(1))
			simple_classes[id(rule)] = names
			rule.selector = scope_selector(rule)

		for at in root.walk_at_rules():
			if KEYFRAMES.match(at.name):
				m = _LOCAL_NAME.fullmatch(at.params.strip())
				if m is not None:
					at.params = export_scoped(m.group(1), at)

		for decl in root.walk_decls():
			if ":local(" in decl.value:
				decl.value = _LOCAL_NAME.sub(lambda m: export_scoped(m.group(1), decl), decl.value)

		for rule in root.walk_rules():
			for decl in rule.each():
				if not isinstance(decl, Declaration) or decl.prop not in COMPOSES_PROPS:
					continue
				classes = simple_classes.get(id(rule))
				if not classes:
					raise CssSyntaxError.at(
						f"composition is only allowed when selector is single :local class name not in \"{rule.selector}\"",
						decl.source,
						reason_code="invalid-composition",
					)
				composed: List[str] = []
				for token in decl.value.split():
					g = _GLOBAL_REF.match(token)
					if g is not None:
						composed.append(g.group(1))
					elif token in imported:
						composed.append(token)
					elif token in exports:
						composed.extend(exports[token])
					else:
						raise CssSyntaxError.at(
							f"referenced class name \"{token}\" in {decl.prop} not found",
							decl.source,
							reason_code="invalid-composition",
						)
				for name in classes:
					bucket = exports.setdefault(name, [])
					for value in composed:
						if value not in bucket:
							bucket.append(value)
				decl.remove()

		if not exports:
			return
		export_rule = Rule(selector=":export")
		export_rule.raws.update({"before": "\n", "between": " ", "after": "\n"})
		for name, scoped in exports.items():
			decl = Declaration(prop=name, value=" ".join(scoped))
			decl.raws.update({"before": "\n  ", "between": ": "})
			export_rule.append(decl)
		root.append(export_rule)

	return _pass


__all__ = ["scope"]
