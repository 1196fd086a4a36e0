# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Small selector-text scanning helpers used by the scoping passes."""

from __future__ import annotations

import re
from typing import List, Optional

from cssmods.core.span import Span
from cssmods.errors import CssSyntaxError

# Class/id/keyframes identifier (after the `.`/`#` sigil).
NAME = re.compile(r"-?[_a-zA-Z\u0080-\uffff][\w\u0080-\uffff-]*")

ICSS_IMPORT = re.compile(r"^:import\((.+)\)$")


def is_icss_selector(selector: str) -> bool:
	return selector == ":export" or ICSS_IMPORT.match(selector) is not None


def unquote(text: str) -> str:
	if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'":
		return text[1:-1]
	return text


def skip_string(text: str, i: int) -> int:
	"""Return the index just past the quoted string starting at `i`."""
	quote = text[i]
	j = i + 1
	while j < len(text):
		if text[j] == "\\":
			j += 2
			continue
		if text[j] == quote:
			return j + 1
		j += 1
	return len(text)


def matching_close(text: str, open_at: int, span: Optional[Span] = None) -> int:
	"""Index of the bracket closing the one at `open_at` (`(` or `[`)."""
	opener = text[open_at]
	closer = ")" if opener == "(" else "]"
	depth = 0
	i = open_at
	while i < len(text):
		ch = text[i]
		if ch in "\"'":
			i = skip_string(text, i)
			continue
		if ch == opener:
			depth += 1
		elif ch == closer:
			depth -= 1
			if depth == 0:
				return i
		i += 1
	raise CssSyntaxError.at(f"Unclosed bracket in '{text}'", span)


def split_top_level(text: str, sep: str) -> List[str]:
	"""Split on `sep` (" " means any whitespace) outside of brackets and strings."""
	parts: List[str] = []
	depth = 0
	start = 0
	i = 0
	while i < len(text):
		ch = text[i]
		if ch in "\"'":
			i = skip_string(text, i)
			continue
		if ch in "([":
			depth += 1
		elif ch in ")]" and depth:
			depth -= 1
		elif depth == 0 and (ch == sep or (sep == " " and ch.isspace())):
			parts.append(text[start:i])
			start = i + 1
		i += 1
	parts.append(text[start:])
	return parts
