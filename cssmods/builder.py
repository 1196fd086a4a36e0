# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Build driver and single-file pipeline.

`CssModules.build()` walks the input tree and, for every file ending in
`.<extension>`, writes the scoped stylesheet and a JS module exporting its
class-name table; every other file is copied through byte-for-byte. Module
loads go through a per-build ResolutionCache so a file imported from many
places is processed once.

Per-file pipeline:

	plugins.before -> values -> local_by_default -> extract_imports
	-> scope -> link_modules -> plugins.after
"""

from __future__ import annotations

import asyncio
import functools
import json
import logging
import os
import posixpath
import shutil
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional

from cssmods.cache import ResolutionCache
from cssmods.config import BuildOptions, unwrap_plugins
from cssmods.errors import ModuleResolutionError
from cssmods.module_ref import ModuleRef, VirtualName, as_module_ref, ensure_posix_path
from cssmods.passes import extract_imports, link_modules, local_by_default, scope, values
from cssmods.processor import Pass, Processor

logger = logging.getLogger(__name__)


@dataclass
class LoadedModule:
	ref: ModuleRef
	injectable_source: str
	export_tokens: Dict[str, str]


class CssModules:
	def __init__(self, input_path: str | os.PathLike[str], output_path: str | os.PathLike[str], options: Optional[BuildOptions] = None, **overrides: Any) -> None:
		opts = options if options is not None else BuildOptions()
		if overrides:
			opts = replace(opts, **overrides)
		self.options = opts
		self.input_path = ensure_posix_path(os.path.abspath(os.fspath(input_path)))
		self.output_path = ensure_posix_path(os.path.abspath(os.fspath(output_path)))
		self.plugins = unwrap_plugins(opts.plugins)
		self.cache: ResolutionCache[LoadedModule] = ResolutionCache()

	def posix_input_path(self) -> str:
		return self.input_path

	def list_files(self) -> List[str]:
		out: List[str] = []
		for dirpath, _dirnames, filenames in os.walk(self.input_path):
			for name in filenames:
				out.append(ensure_posix_path(os.path.join(dirpath, name)))
		return sorted(out)

	def relative_path(self, path: str) -> str:
		return ensure_posix_path(path).replace(self.input_path + "/", "", 1)

	# --- build -------------------------------------------------------------

	async def build(self) -> List[Optional[LoadedModule]]:
		self.cache.reset()
		_fire(self.options.on_build_start)
		files = self.list_files()
		logger.info("building %d file(s) from %s", len(files), self.input_path)
		try:
			results = await asyncio.gather(*(self.process(path) for path in files))
		except Exception:
			logger.info("build failed: %s", self.input_path)
			_fire(self.options.on_build_error)
			_fire(self.options.on_build_end)
			raise
		logger.info("build finished: %d module(s) loaded", self.cache.started)
		_fire(self.options.on_build_success)
		_fire(self.options.on_build_end)
		return list(results)

	def build_sync(self) -> List[Optional[LoadedModule]]:
		return asyncio.run(self.build())

	def is_target(self, path: str) -> bool:
		return path.endswith("." + self.options.extension)

	async def process(self, source_path: str) -> Optional[LoadedModule]:
		relative = self.relative_path(source_path)
		destination = posixpath.join(self.output_path, relative)

		if not self.is_target(source_path):
			os.makedirs(posixpath.dirname(destination), exist_ok=True)
			shutil.copyfile(source_path, destination)
			return None

		if self.options.on_process_file is not None:
			self.options.on_process_file(source_path)

		module = await self.load_path(source_path)
		css = self.format_injectable_source(module.injectable_source, relative)
		js = self.format_export_tokens(module.export_tokens, relative)

		os.makedirs(posixpath.dirname(destination), exist_ok=True)
		_write(destination, css, self.options.encoding)
		js_path = posixpath.join(self.output_path, self.js_file_path(relative))
		os.makedirs(posixpath.dirname(js_path), exist_ok=True)
		_write(js_path, js, self.options.encoding)
		return module

	# --- output formatting -------------------------------------------------

	def js_file_path(self, relative_css_path: str) -> str:
		if self.options.get_js_file_path is not None:
			return self.options.get_js_file_path(relative_css_path)
		return relative_css_path[: -len(self.options.extension) - 1] + ".js"

	def format_export_tokens(self, export_tokens: Dict[str, str], module_path: str) -> str:
		if self.options.format_js is not None:
			return self.options.format_js(export_tokens, module_path)
		return "export default " + json.dumps(export_tokens, indent=2, ensure_ascii=False) + ";"

	def format_injectable_source(self, injectable_source: str, module_path: str) -> str:
		if self.options.format_css is not None:
			return self.options.format_css(injectable_source, module_path)
		if self.options.enable_source_maps:
			return injectable_source
		return f"/* styles for {module_path} */\n{injectable_source}"

	# --- resolution --------------------------------------------------------

	async def fetch_exports(self, import_path: str, from_file: str) -> Dict[str, str]:
		"""Export table of `import_path` as seen from `from_file`."""
		relative = ensure_posix_path(import_path)
		if relative in self.options.virtual_modules:
			module = await self.load_path(VirtualName(relative))
		else:
			target = self.options.resolve_path(relative, ensure_posix_path(from_file))
			module = await self.load_path(target)
		return module.export_tokens

	def load_path(self, dependency: Any) -> "asyncio.Future[LoadedModule]":
		ref = as_module_ref(dependency)
		return self.cache.resolve(ref, functools.partial(self._load_module, ref))

	async def _load_module(self, ref: ModuleRef) -> LoadedModule:
		if isinstance(ref, VirtualName):
			return LoadedModule(ref=ref, injectable_source="", export_tokens=dict(self.options.virtual_modules[ref.name]))
		path = ref.key
		try:
			with open(path, encoding=self.options.encoding, newline="") as fh:
				content = fh.read()
		except OSError as exc:
			raise ModuleResolutionError(
				reason_code="module-not-found",
				message=f"cannot read module '{path}': {exc.strerror or exc}",
				path=path,
			) from exc
		except LookupError as exc:
			raise ModuleResolutionError(
				reason_code="module-unreadable",
				message=f"cannot read module '{path}': unknown encoding '{self.options.encoding}'",
				path=path,
			) from exc
		except UnicodeDecodeError as exc:
			raise ModuleResolutionError(
				reason_code="module-unreadable",
				message=f"cannot decode module '{path}' as {self.options.encoding}: {exc.reason} at byte {exc.start}",
				path=path,
			) from exc
		return await self.load(content, ref)

	async def load(self, content: str, ref: ModuleRef) -> LoadedModule:
		opts: Dict[str, Any] = {
			"from": ref.key,
			"relative_from": self.relative_path(ref.key),
			"map": self.source_map_options(),
		}
		opts.update(self.options.processor_options)
		processor = Processor([*self.plugins.before, *self.loader_passes(ref), *self.plugins.after])
		result = await processor.process(content, opts)
		return LoadedModule(ref=ref, injectable_source=result.css, export_tokens=result.exports)

	def source_map_options(self) -> Optional[Dict[str, Any]]:
		if not self.options.enable_source_maps:
			return None
		base_dir = self.options.source_map_base_dir
		sub = "/" + ensure_posix_path(base_dir).strip("/") if base_dir else ""
		return {"sources_content": True, "annotation": f"{self.input_path}{sub}/output.map"}

	def generate_relative_scoped_name(self, ref: ModuleRef, name: str, absolute_path: str, rule_text: str) -> str:
		relative = self.relative_path(absolute_path)
		return self.options.generate_scoped_name(name, relative, rule_text, ref.handle)

	def loader_passes(self, ref: ModuleRef) -> List[Pass]:
		return [
			values,
			local_by_default(),
			extract_imports,
			scope(functools.partial(self.generate_relative_scoped_name, ref)),
			link_modules(
				self.fetch_exports,
				on_module_resolution_failure=self.options.on_module_resolution_failure,
				on_import_resolution_failure=self.options.on_import_resolution_failure,
			),
		]


def _fire(hook: Optional[Any]) -> None:
	if hook is not None:
		hook()


def _write(path: str, text: str, encoding: str) -> None:
	with open(path, "w", encoding=encoding, newline="") as fh:
		fh.write(text)


__all__ = ["CssModules", "LoadedModule"]
