# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lightweight source span representation used by tree nodes and errors.

Lines and columns are 1-based (as reported by the lark lexer); `end_column`
points one past the last character. `start_pos`/`end_pos` are 0-based offsets
into the original input text so passes can recover the exact source of a
node.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Represents a source span (best-effort file/line/column plus offsets)."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None
	end_line: Optional[int] = None
	end_column: Optional[int] = None
	start_pos: Optional[int] = None
	end_pos: Optional[int] = None

	@classmethod
	def from_token(cls, tok: Any, *, file: Optional[str] = None) -> "Span":
		"""Construct a Span covering a single lark token."""
		return cls(
			file=file,
			line=getattr(tok, "line", None),
			column=getattr(tok, "column", None),
			end_line=getattr(tok, "end_line", None),
			end_column=getattr(tok, "end_column", None),
			start_pos=getattr(tok, "start_pos", None),
			end_pos=getattr(tok, "end_pos", None),
		)

	@classmethod
	def between(cls, start: "Span", end: "Span") -> "Span":
		"""Span from the start of `start` to the end of `end`."""
		return cls(
			file=start.file,
			line=start.line,
			column=start.column,
			end_line=end.end_line,
			end_column=end.end_column,
			start_pos=start.start_pos,
			end_pos=end.end_pos,
		)

	def format_short(self) -> str:
		f = self.file or "<unknown>"
		l = self.line if self.line is not None else "?"
		c = self.column if self.column is not None else "?"
		return f"{f}:{l}:{c}"


__all__ = ["Span"]
