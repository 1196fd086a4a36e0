# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Build configuration.

`BuildOptions` carries every option the build understands; callables are
strategies/hooks and default to the built-in behavior. `load_config_json`
reads the data-only subset from a JSON file (used by the CLI).
"""

from __future__ import annotations

import json
import posixpath
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from cssmods.naming import ScopedNameGenerator, generate_scoped_name
from cssmods.passes.link_modules import ImportResolutionFailureHandler, ModuleResolutionFailureHandler
from cssmods.processor import Pass


def resolve_path(import_path: str, from_file: str) -> str:
	"""Default resolver: `import_path` relative to the importing file's directory."""
	return posixpath.normpath(posixpath.join(posixpath.dirname(from_file), import_path))


@dataclass
class PluginStages:
	before: List[Pass] = field(default_factory=list)
	after: List[Pass] = field(default_factory=list)


def unwrap_plugins(plugins: Union[None, Sequence[Pass], Mapping[str, Sequence[Pass]], PluginStages]) -> PluginStages:
	"""A bare sequence runs after the core passes; a mapping may set both stages."""
	if plugins is None:
		return PluginStages()
	if isinstance(plugins, PluginStages):
		return PluginStages(before=list(plugins.before), after=list(plugins.after))
	if isinstance(plugins, Mapping):
		return PluginStages(before=list(plugins.get("before") or []), after=list(plugins.get("after") or []))
	return PluginStages(after=list(plugins))


Hook = Callable[[], None]


@dataclass
class BuildOptions:
	extension: str = "css"
	encoding: str = "utf-8"
	plugins: Union[None, Sequence[Pass], Mapping[str, Sequence[Pass]], PluginStages] = None
	generate_scoped_name: ScopedNameGenerator = generate_scoped_name
	resolve_path: Callable[[str, str], Any] = resolve_path
	format_js: Optional[Callable[[Dict[str, str], str], str]] = None
	format_css: Optional[Callable[[str, str], str]] = None
	get_js_file_path: Optional[Callable[[str], str]] = None
	on_module_resolution_failure: Optional[ModuleResolutionFailureHandler] = None
	on_import_resolution_failure: Optional[ImportResolutionFailureHandler] = None
	virtual_modules: Dict[str, Dict[str, str]] = field(default_factory=dict)
	enable_source_maps: bool = False
	source_map_base_dir: Optional[str] = None
	processor_options: Dict[str, Any] = field(default_factory=dict)
	on_process_file: Optional[Callable[[str], None]] = None
	on_build_start: Optional[Hook] = None
	on_build_end: Optional[Hook] = None
	on_build_success: Optional[Hook] = None
	on_build_error: Optional[Hook] = None


# JSON key -> (BuildOptions field, accepted types)
_JSON_FIELDS: dict[str, tuple[str, tuple[type, ...]]] = {
	"extension": ("extension", (str,)),
	"encoding": ("encoding", (str,)),
	"virtualModules": ("virtual_modules", (dict,)),
	"enableSourceMaps": ("enable_source_maps", (bool,)),
	"sourceMapBaseDir": ("source_map_base_dir", (str, type(None))),
}


def options_from_dict(data: Mapping[str, Any], base: Optional[BuildOptions] = None) -> BuildOptions:
	"""Apply JSON config data on top of `base` (or the defaults)."""
	if not isinstance(data, Mapping):
		raise ValueError("config must be a JSON object")
	updates: Dict[str, Any] = {}
	for key, value in data.items():
		spec = _JSON_FIELDS.get(key)
		if spec is None:
			raise ValueError(f"unknown config key '{key}'")
		attr, types = spec
		if not isinstance(value, types):
			raise ValueError(f"config key '{key}' has invalid type {type(value).__name__}")
		if attr == "extension" and (not value or value.startswith(".")):
			raise ValueError("config key 'extension' must be non-empty and given without a leading dot")
		if attr == "virtual_modules":
			for name, table in value.items():
				if not isinstance(table, dict) or not all(isinstance(k, str) and isinstance(v, str) for k, v in table.items()):
					raise ValueError(f"virtual module '{name}' must map strings to strings")
			value = {name: dict(table) for name, table in value.items()}
		updates[attr] = value
	return replace(base if base is not None else BuildOptions(), **updates)


def load_config_json(path: Path, base: Optional[BuildOptions] = None) -> BuildOptions:
	data = json.loads(path.read_text(encoding="utf-8"))
	return options_from_dict(data, base)


__all__ = [
	"BuildOptions",
	"PluginStages",
	"load_config_json",
	"options_from_dict",
	"resolve_path",
	"unwrap_plugins",
]
