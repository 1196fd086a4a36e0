# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Source map (v3) generation for serialized stylesheets.

Mappings are recorded at the start of every node that has a source span and
at the end of every node (blocks record their end on the closing `}`).
Generated and original positions are 0-based in the encoded map.
"""

from __future__ import annotations

import base64
import json
import posixpath
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from cssmods.parser.ast import Node, Root
from cssmods.parser.stringify import Stringifier

_B64 = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"

# (generated line, generated column, original line, original column); lines 1-based.
Mapping = Tuple[int, int, int, int]


def encode_vlq(value: int) -> str:
	"""Encode one integer as a base64 VLQ digit string."""
	vlq = ((-value) << 1) | 1 if value < 0 else value << 1
	out: List[str] = []
	while True:
		digit = vlq & 31
		vlq >>= 5
		if vlq:
			digit |= 32
		out.append(_B64[digit])
		if not vlq:
			return "".join(out)


def encode_mappings(mappings: List[Mapping]) -> str:
	"""Encode mappings for a single source (source index is always 0)."""
	lines: List[str] = []
	segments: List[str] = []
	cur_line = 1
	prev_gen_col = 0
	prev_orig_line = 0
	prev_orig_col = 0
	for gen_line, gen_col, orig_line, orig_col in mappings:
		while cur_line < gen_line:
			lines.append(",".join(segments))
			segments = []
			cur_line += 1
			prev_gen_col = 0
		orig_line0 = orig_line - 1
		segments.append(
			encode_vlq(gen_col - prev_gen_col)
			+ encode_vlq(0)
			+ encode_vlq(orig_line0 - prev_orig_line)
			+ encode_vlq(orig_col - prev_orig_col)
		)
		prev_gen_col = gen_col
		prev_orig_line = orig_line0
		prev_orig_col = orig_col
	lines.append(",".join(segments))
	return ";".join(lines)


@dataclass
class GeneratedCss:
	css: str
	map: Optional[dict[str, Any]] = None


class MapGenerator:
	"""
	Serialize a Root while tracking generated positions.

	`annotation` is the (virtual) path of the map file; `sources` and `file`
	are expressed relative to its directory, as an external map next to the
	output would reference them.
	"""

	def __init__(self, root: Root, *, from_path: str, annotation: str, sources_content: bool = True) -> None:
		self.root = root
		self.from_path = from_path
		self.annotation = annotation
		self.sources_content = sources_content
		self._parts: List[str] = []
		self._mappings: List[Mapping] = []
		self._line = 1
		self._column = 1

	def _add(self, orig_line: Optional[int], orig_col: Optional[int]) -> None:
		if orig_line is None or orig_col is None:
			return
		mapping = (self._line, self._column - 1, orig_line, orig_col)
		if self._mappings and self._mappings[-1] == mapping:
			return
		self._mappings.append(mapping)

	def _builder(self, text: str, node: Optional[Node], kind: Optional[str]) -> None:
		self._parts.append(text)
		src = node.source if node is not None else None
		if src is not None and kind != "end" and src.column is not None:
			self._add(src.line, src.column - 1)
		newlines = text.count("\n")
		if newlines:
			self._line += newlines
			self._column = len(text) - text.rfind("\n")
		else:
			self._column += len(text)
		if src is not None and kind != "start" and src.end_column is not None:
			self._add(src.end_line, src.end_column - 1)

	def _relative(self, path: str) -> str:
		return posixpath.relpath(path, posixpath.dirname(self.annotation))

	def generate(self) -> GeneratedCss:
		Stringifier(self._builder).stringify(self.root)
		css = "".join(self._parts)
		source = self._relative(self.from_path)
		map_json: dict[str, Any] = {
			"version": 3,
			"sources": [source],
			"names": [],
			"mappings": encode_mappings(self._mappings),
			"file": source,
		}
		if self.sources_content:
			inp = self.root.input
			map_json["sourcesContent"] = [inp.css if inp is not None else None]
		eol = "\r\n" if "\r\n" in css else "\n"
		payload = base64.b64encode(json.dumps(map_json, separators=(",", ":"), ensure_ascii=False).encode("utf-8")).decode("ascii")
		css += f"{eol}/*# sourceMappingURL=data:application/json;base64,{payload} */"
		return GeneratedCss(css=css, map=map_json)


__all__ = ["GeneratedCss", "MapGenerator", "encode_mappings", "encode_vlq"]
