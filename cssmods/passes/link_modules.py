# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Link pass: resolve `:import` rules against other modules' export tables.

Each root-level `:import(<path>) { alias: remote; ... }` rule is fetched
through `fetch_exports(path, from_file)`; all imports of a module are fetched
concurrently. Fetched values are bound to their aliases (the translation
table), the import rules are dropped, every alias occurrence in the sheet is
replaced, and finally the `:export` rules are folded into `result.exports`
and dropped as well.

Failure policy:
- the target module cannot be fetched: `on_module_resolution_failure(failure,
  path, from_file)` if configured (the import then binds nothing), otherwise
  the failure propagates. Syntax errors in the target always propagate.
- the target lacks a symbol: the alias is bound to UNBOUND, which leaves
  stylesheet text untouched and exports as the `undefined` marker;
  `on_import_resolution_failure(symbol, path, from_file)` is notified first
  when configured.

Every missing symbol, and every module failure passed to the handler, is also
recorded as a warning on `result.messages`.
An unhandled ModuleResolutionError is re-raised carrying the import path and
the importing file.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import re
from dataclasses import replace
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Protocol, Tuple, Union

from cssmods.errors import CssSyntaxError, ModuleResolutionError
from cssmods.parser.ast import Declaration, Root, Rule
from cssmods.passes.selectors import ICSS_IMPORT, unquote
from cssmods.passes.symbols import UNBOUND, UNDEFINED_MARKER, replace_symbols, replace_value_symbols

logger = logging.getLogger(__name__)

ExportTable = Mapping[str, str]
FetchExports = Callable[[str, str], Union[Awaitable[ExportTable], ExportTable]]


class ModuleResolutionFailureHandler(Protocol):
	def __call__(self, failure: BaseException, import_path: str, relative_to: str) -> None:
		...


class ImportResolutionFailureHandler(Protocol):
	def __call__(self, symbol: str, import_path: str, relative_to: str) -> None:
		...


def link_modules(
	fetch_exports: FetchExports,
	*,
	on_module_resolution_failure: Optional[ModuleResolutionFailureHandler] = None,
	on_import_resolution_failure: Optional[ImportResolutionFailureHandler] = None,
):
	"""Build the link pass around an export fetcher and optional failure handlers."""

	async def _fetch_import(rule: Rule, m: re.Match[str], relative_to: str, result: Any) -> List[Tuple[str, object]]:
		path = unquote(m.group(1).strip())
		logger.debug("fetching %s from %s", path, relative_to)
		try:
			exports = fetch_exports(path, relative_to)
			if inspect.isawaitable(exports):
				exports = await exports
		except CssSyntaxError:
			raise
		except Exception as failure:
			if on_module_resolution_failure is None:
				if isinstance(failure, ModuleResolutionError) and failure.import_path is None:
					raise replace(failure, import_path=path, file=relative_to) from failure
				raise
			logger.debug("module resolution failure for %s from %s: %s", path, relative_to, failure)
			result.warn(f"could not load '{path}'", import_path=path)
			on_module_resolution_failure(failure, path, relative_to)
			return []

		bindings: List[Tuple[str, object]] = []
		for decl in rule.each():
			if not isinstance(decl, Declaration):
				continue
			if decl.value in exports:
				bindings.append((decl.prop, exports[decl.value]))
				continue
			result.warn(f"'{decl.value}' is not exported by '{path}'", import_path=path, symbol=decl.value)
			if on_import_resolution_failure is not None:
				on_import_resolution_failure(decl.value, path, relative_to)
			bindings.append((decl.prop, UNBOUND))
		return bindings

	async def _link(root: Root, result: Any) -> None:
		opts = getattr(result, "opts", {}) or {}
		relative_to = opts.get("from") or (root.input.file if root.input is not None else None) or ""

		imports: List[Tuple[Rule, re.Match[str]]] = []
		for node in root.each():
			if isinstance(node, Rule):
				m = ICSS_IMPORT.match(node.selector)
				if m is not None:
					imports.append((node, m))
		fetched = await asyncio.gather(*(_fetch_import(rule, m, relative_to, result) for rule, m in imports))

		# Merge in source order; a later import of the same alias wins.
		translations: Dict[str, object] = {}
		for bindings in fetched:
			for alias, value in bindings:
				translations[alias] = value

		for rule, _m in imports:
			rule.remove()

		replace_symbols(root, translations)

		exports: Dict[str, str] = {}
		for node in root.each():
			if not isinstance(node, Rule) or node.selector != ":export":
				continue
			for decl in node.each():
				if isinstance(decl, Declaration):
					decl.value = replace_value_symbols(decl.value, translations, missing=UNDEFINED_MARKER)
					exports[decl.prop] = decl.value
			node.remove()
		result.exports = exports

	return _link


__all__ = [
	"ExportTable",
	"FetchExports",
	"ImportResolutionFailureHandler",
	"ModuleResolutionFailureHandler",
	"link_modules",
]
