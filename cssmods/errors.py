# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from cssmods.core.span import Span


@dataclass(eq=False)
class CssModulesError(Exception):
	"""
	A structured, serializable error for the build.

	`reason_code` is stable and meant for tooling; `message` is for humans.
	"""

	reason_code: str
	message: str
	file: str | None = None

	def __post_init__(self) -> None:
		Exception.__init__(self, self.message)

	def __str__(self) -> str:
		return self.format_human()

	def to_dict(self) -> dict[str, Any]:
		return {"reason_code": self.reason_code, "message": self.message, "file": self.file}

	def format_human(self) -> str:
		parts: list[str] = [f"[{self.reason_code}] {self.message}"]
		if self.file:
			parts.append(f"file={self.file}")
		return " ".join(parts)


@dataclass(eq=False)
class CssSyntaxError(CssModulesError):
	"""
	Malformed stylesheet source, or a CSS-modules construct used where it is
	not allowed (e.g. `composes` on a compound selector).
	"""

	span: Span | None = None

	@classmethod
	def at(cls, message: str, span: Span | None, *, reason_code: str = "css-syntax") -> "CssSyntaxError":
		return cls(reason_code=reason_code, message=message, file=span.file if span is not None else None, span=span)

	@property
	def line(self) -> int | None:
		return self.span.line if self.span is not None else None

	@property
	def column(self) -> int | None:
		return self.span.column if self.span is not None else None

	def to_dict(self) -> dict[str, Any]:
		out = super().to_dict()
		out["line"] = self.line
		out["column"] = self.column
		return out

	def format_human(self) -> str:
		if self.span is not None:
			return f"{self.span.format_short()}: {self.message}"
		return super().format_human()


@dataclass(eq=False)
class ModuleResolutionError(CssModulesError):
	"""A referenced module could not be located or read."""

	path: str | None = None
	import_path: str | None = None

	def to_dict(self) -> dict[str, Any]:
		out = super().to_dict()
		out["path"] = self.path
		out["import_path"] = self.import_path
		return out

	def format_human(self) -> str:
		parts: list[str] = [f"[{self.reason_code}] {self.message}"]
		if self.import_path:
			parts.append(f"import_path={self.import_path}")
		if self.file:
			parts.append(f"from={self.file}")
		return " ".join(parts)


__all__ = ["CssModulesError", "CssSyntaxError", "ModuleResolutionError"]
