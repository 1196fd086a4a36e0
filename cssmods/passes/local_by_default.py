# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Local-by-default pass.

Marks every class, id and keyframes name as `:local(...)` unless it sits in
a `:global` context, so the scope pass only has to look for `:local`:

	.a :global(.b) .c       ->  :local(.a) .b :local(.c)
	:global .a .b           ->  .a .b
	@keyframes spin         ->  @keyframes :local(spin)
	animation: spin 1s      ->  animation: :local(spin) 1s
"""

from __future__ import annotations

import re
from typing import List, Optional

from cssmods.core.span import Span
from cssmods.parser.ast import AtRule, Declaration, Root, Rule
from cssmods.passes.selectors import NAME, is_icss_selector, matching_close, skip_string, split_top_level

KEYFRAMES = re.compile(r"^(-\w+-)?keyframes$", re.IGNORECASE)

_WRAPPED = re.compile(r"^:(global|local)\(\s*([\w-]+)\s*\)$")

_ANIMATION_KEYWORDS = {
	"alternate",
	"alternate-reverse",
	"backwards",
	"both",
	"ease",
	"ease-in",
	"ease-in-out",
	"ease-out",
	"forwards",
	"infinite",
	"inherit",
	"initial",
	"linear",
	"none",
	"normal",
	"paused",
	"reverse",
	"revert",
	"running",
	"step-end",
	"step-start",
	"unset",
}


def _bare_switch(text: str, i: int) -> Optional[str]:
	"""Return "global"/"local" if a bare `:global`/`:local` pseudo starts at i."""
	for name in ("global", "local"):
		token = ":" + name
		if text.startswith(token, i):
			nxt = text[i + len(token)] if i + len(token) < len(text) else ""
			if not (nxt.isalnum() or nxt in "-_("):
				return name
	return None


def localize_selector(selector: str, local: bool = True, span: Optional[Span] = None) -> str:
	"""Rewrite one selector list, wrapping names in `:local(...)` where local."""
	return ",".join(_localize(part, local, span) for part in split_top_level(selector, ","))


def _localize(text: str, local: bool, span: Optional[Span]) -> str:
	out: List[str] = []
	i = 0
	while i < len(text):
		ch = text[i]
		if text.startswith(":global(", i) or text.startswith(":local(", i):
			is_global = text.startswith(":global(", i)
			open_at = text.index("(", i)
			close = matching_close(text, open_at, span)
			inner = text[open_at + 1:close]
			out.append(inner.strip() if is_global else _localize(inner.strip(), True, span))
			i = close + 1
			continue
		switch = _bare_switch(text, i)
		if switch is not None:
			local = switch == "local"
			i += len(switch) + 1
			emitted = "".join(out)
			if not emitted or emitted[-1].isspace() or emitted[-1] in ">+~":
				while i < len(text) and text[i].isspace():
					i += 1
			continue
		if ch in ".#":
			m = NAME.match(text, i + 1)
			if m is not None:
				name = ch + m.group(0)
				out.append(f":local({name})" if local else name)
				i = m.end()
				continue
		if ch in "\"'":
			end = skip_string(text, i)
			out.append(text[i:end])
			i = end
			continue
		if ch == "[":
			end = matching_close(text, i, span) + 1
			out.append(text[i:end])
			i = end
			continue
		out.append(ch)
		i += 1
	return "".join(out)


def _localize_animation_name(value: str, local: bool) -> str:
	parts = []
	for part in split_top_level(value, ","):
		name = part.strip()
		lead = part[: len(part) - len(part.lstrip())]
		trail = part[len(part.rstrip()):]
		parts.append(lead + _localize_keyframes_name(name, local) + trail)
	return ",".join(parts)


def _localize_keyframes_name(name: str, local: bool) -> str:
	m = _WRAPPED.match(name)
	if m is not None:
		return name if m.group(1) == "local" else m.group(2)
	if not local or name.lower() in _ANIMATION_KEYWORDS or NAME.fullmatch(name) is None:
		return name
	return f":local({name})"


def _localize_animation(value: str, local: bool) -> str:
	groups = []
	for group in split_top_level(value, ","):
		out: List[str] = []
		done = False
		i = 0
		while i < len(group):
			if group[i].isspace():
				out.append(group[i])
				i += 1
				continue
			j = i
			depth = 0
			while j < len(group) and (depth or not group[j].isspace()):
				if group[j] == "(":
					depth += 1
				elif group[j] == ")" and depth:
					depth -= 1
				j += 1
			token = group[i:j]
			is_name = _WRAPPED.match(token) is not None or (
				NAME.fullmatch(token) is not None and token.lower() not in _ANIMATION_KEYWORDS
			)
			if is_name and not done:
				out.append(_localize_keyframes_name(token, local))
				done = True
			else:
				out.append(token)
			i = j
		groups.append("".join(out))
	return ",".join(groups)


def _inside_keyframes(rule: Rule) -> bool:
	parent = rule.parent
	while parent is not None:
		if isinstance(parent, AtRule) and KEYFRAMES.match(parent.name):
			return True
		parent = parent.parent
	return False


def local_by_default(mode: str = "local"):
	"""Build the pass; `mode` is the default scope ("local" or "global")."""
	if mode not in ("local", "global"):
		raise ValueError(f"unsupported local-by-default mode '{mode}'")
	default_local = mode == "local"

	def _pass(root: Root, result: object) -> None:
		for node in root.walk():
			if isinstance(node, Rule):
				if is_icss_selector(node.selector) or _inside_keyframes(node):
					continue
				node.selector = localize_selector(node.selector, default_local, node.source)
			elif isinstance(node, AtRule) and KEYFRAMES.match(node.name):
				node.params = _localize_keyframes_name(node.params.strip(), default_local)
			elif isinstance(node, Declaration):
				prop = node.prop.lower()
				if prop.endswith("animation-name"):
					node.value = _localize_animation_name(node.value, default_local)
				elif prop.endswith("animation"):
					node.value = _localize_animation(node.value, default_local)

	return _pass


__all__ = ["KEYFRAMES", "local_by_default", "localize_selector"]
