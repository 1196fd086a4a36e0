# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Scoped name generation.

A generator maps `(local name, module path relative to the build root, rule
source text, dependency handle)` to a build-unique name. Generators must be
pure: identical inputs give identical names, so output is reproducible.
"""

from __future__ import annotations

import hashlib
import re
from typing import Any, Protocol

_EXTENSION = re.compile(r"\.[^./\\]+$")
_NON_WORD = re.compile(r"[\W_]+")


class ScopedNameGenerator(Protocol):
	def __call__(self, name: str, relative_path: str, rule_text: str, dependency: Any = None) -> str:
		"""Return the scoped name for `name` declared in `relative_path`."""
		...


def sanitize_path(relative_path: str) -> str:
	"""`components/my-button.css` -> `components_my_button`."""
	stem = _EXTENSION.sub("", relative_path)
	return _NON_WORD.sub("_", stem).strip("_")


def generate_scoped_name(name: str, relative_path: str, rule_text: str = "", dependency: Any = None) -> str:
	"""Default generator: `_<sanitized path>__<name>`."""
	return f"_{sanitize_path(relative_path)}__{name}"


def hashed_scoped_name(name: str, relative_path: str, rule_text: str = "", dependency: Any = None) -> str:
	"""
	Content-hash generator for production builds: `<name>_<hash>`.

	The hash covers the relative path and the declaring rule, so a name only
	changes when its rule does.
	"""
	digest = hashlib.sha256(f"{relative_path}\0{rule_text}".encode("utf-8")).hexdigest()
	return f"{name}_{digest[:8]}"


__all__ = ["ScopedNameGenerator", "generate_scoped_name", "hashed_scoped_name", "sanitize_path"]
