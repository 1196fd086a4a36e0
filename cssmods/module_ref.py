# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Module references.

A module is identified by a file path, a virtual module name, or an opaque
handle returned by a custom path resolver. Every variant exposes `key`, the
canonical string used for cache identity, and `handle`, the value handed
back to custom name generators unchanged.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Union


def ensure_posix_path(path: str) -> str:
	if os.sep != "/":
		return path.replace(os.sep, "/")
	return path


@dataclass(frozen=True)
class FilePath:
	path: str

	@property
	def key(self) -> str:
		return self.path

	@property
	def handle(self) -> str:
		return self.path

	def __str__(self) -> str:
		return self.path


@dataclass(frozen=True)
class VirtualName:
	name: str

	@property
	def key(self) -> str:
		return f"virtual:{self.name}"

	@property
	def handle(self) -> str:
		return self.name

	def __str__(self) -> str:
		return self.name


@dataclass(frozen=True)
class OpaqueHandle:
	"""Any object with a stable `str()`; the string is read when the key is needed."""

	handle: Any

	@property
	def key(self) -> str:
		return ensure_posix_path(str(self.handle))

	def __str__(self) -> str:
		return self.key


ModuleRef = Union[FilePath, VirtualName, OpaqueHandle]


def as_module_ref(value: Any) -> ModuleRef:
	"""Normalize a resolver result to a ModuleRef."""
	if isinstance(value, (FilePath, VirtualName, OpaqueHandle)):
		return value
	if isinstance(value, str):
		return FilePath(ensure_posix_path(value))
	if isinstance(value, os.PathLike):
		return FilePath(ensure_posix_path(os.fspath(value)))
	return OpaqueHandle(value)


__all__ = ["FilePath", "ModuleRef", "OpaqueHandle", "VirtualName", "as_module_ref", "ensure_posix_path"]
