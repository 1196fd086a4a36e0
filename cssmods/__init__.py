# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
cssmods: CSS-modules build pipeline.

Rewrites a tree of stylesheets with file-local class names into globally
unique names plus a per-file export table, resolving `composes`, `@value`
and `:import` references across files. The entrypoint is
`cssmods.builder.CssModules`; the CLI lives in `cssmods.cli`.
"""

from cssmods.builder import CssModules, LoadedModule
from cssmods.config import BuildOptions, PluginStages, load_config_json
from cssmods.errors import CssModulesError, CssSyntaxError, ModuleResolutionError
from cssmods.naming import ScopedNameGenerator, generate_scoped_name

__all__ = [
	"BuildOptions",
	"CssModules",
	"CssModulesError",
	"CssSyntaxError",
	"LoadedModule",
	"ModuleResolutionError",
	"PluginStages",
	"ScopedNameGenerator",
	"generate_scoped_name",
	"load_config_json",
]
