# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Whole-token symbol replacement shared by the value and link passes.

A symbol is a run of word characters and dashes (optionally `$`-prefixed),
so `--brand` and `i__imported_green_0` are replaced while `green` inside
`dark-green` is not.
"""

from __future__ import annotations

import re
from typing import Mapping, Optional

from cssmods.parser.ast import AtRule, Declaration, Root, Rule


class _Unbound:
	"""Marker for an imported symbol whose target module lacks it."""

	def __repr__(self) -> str:
		return "UNBOUND"


UNBOUND = _Unbound()

# Marker written into export values for UNBOUND symbols.
UNDEFINED_MARKER = "undefined"

_VALUE_NAME = re.compile(r"\$?[\w-]+")

# At-rules whose params may reference symbols.
_SYMBOL_AT_RULES = {"media", "value", "custom-media"}


def replace_value_symbols(value: str, replacements: Mapping[str, object], *, missing: Optional[str] = None) -> str:
	"""
	Replace every whole-token occurrence of a key in `replacements`.

	UNBOUND entries are left untouched unless `missing` is given, in which
	case they are replaced by it.
	"""
	if not replacements:
		return value

	def _sub(m: re.Match[str]) -> str:
		token = m.group(0)
		rep = replacements.get(token)
		if rep is None:
			return token
		if rep is UNBOUND:
			return missing if missing is not None else token
		return str(rep)

	return _VALUE_NAME.sub(_sub, value)


def replace_symbols(root: Root, replacements: Mapping[str, object]) -> None:
	"""Apply `replace_value_symbols` to declaration values, selectors and symbol-bearing at-rule params."""
	if not replacements:
		return
	for node in root.walk():
		if isinstance(node, Declaration):
			node.value = replace_value_symbols(node.value, replacements)
		elif isinstance(node, Rule):
			node.selector = replace_value_symbols(node.selector, replacements)
		elif isinstance(node, AtRule) and node.name.lower() in _SYMBOL_AT_RULES:
			node.params = replace_value_symbols(node.params, replacements)


__all__ = ["UNBOUND", "UNDEFINED_MARKER", "replace_symbols", "replace_value_symbols"]
