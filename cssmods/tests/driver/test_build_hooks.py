# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Lifecycle hooks, failure handlers, plugins and source maps."""

from __future__ import annotations

import base64
import json
from pathlib import Path

import pytest

from cssmods.builder import CssModules
from cssmods.config import PluginStages
from cssmods.errors import CssSyntaxError, ModuleResolutionError
from cssmods.parser.ast import Comment
from tree_helpers import css_output, js_output, read_tree, write_tree


class _Counter:
	def __init__(self) -> None:
		self.count = 0

	def __call__(self) -> None:
		self.count += 1


def _hooks() -> dict:
	return {
		"on_build_start": _Counter(),
		"on_build_end": _Counter(),
		"on_build_success": _Counter(),
		"on_build_error": _Counter(),
	}


def test_on_process_file_receives_absolute_posix_path(tmp_path: Path) -> None:
	src = write_tree(tmp_path / "in", {"foo.css": ".abc {}"})
	called: list[str] = []
	modules = CssModules(src, tmp_path / "out", on_process_file=called.append)
	modules.build_sync()
	assert called == [modules.posix_input_path() + "/foo.css"]


def test_successful_build_fires_start_success_end(tmp_path: Path) -> None:
	src = write_tree(tmp_path / "in", {"foo.css": ".abc {}"})
	hooks = _hooks()
	during: list[tuple[int, int, int, int]] = []

	def on_process_file(path: str) -> None:
		during.append(tuple(hooks[k].count for k in ("on_build_start", "on_build_end", "on_build_success", "on_build_error")))

	CssModules(src, tmp_path / "out", on_process_file=on_process_file, **hooks).build_sync()
	assert during == [(1, 0, 0, 0)]
	assert [hooks[k].count for k in ("on_build_start", "on_build_end", "on_build_success", "on_build_error")] == [1, 1, 1, 0]


def test_failed_build_fires_error_then_end_and_raises(tmp_path: Path) -> None:
	src = write_tree(tmp_path / "in", {"foo.css": ".abc {"})
	hooks = _hooks()
	with pytest.raises(CssSyntaxError, match="Unclosed block"):
		CssModules(src, tmp_path / "out", **hooks).build_sync()
	assert [hooks[k].count for k in ("on_build_start", "on_build_end", "on_build_success", "on_build_error")] == [1, 1, 0, 1]


def test_missing_module_without_handler_fails_build(tmp_path: Path) -> None:
	src = write_tree(tmp_path / "in", {"foo.css": '.abc { composes: def from "nonexistent"; }'})
	with pytest.raises(ModuleResolutionError) as excinfo:
		CssModules(src, tmp_path / "out").build_sync()
	assert excinfo.value.reason_code == "module-not-found"
	assert excinfo.value.path is not None and excinfo.value.path.endswith("/nonexistent")
	assert excinfo.value.import_path == "nonexistent"
	assert excinfo.value.file is not None and excinfo.value.file.endswith("/foo.css")


def test_missing_module_handler_is_invoked_and_build_continues(tmp_path: Path) -> None:
	src = write_tree(tmp_path / "in", {"foo.css": '.abc { composes: def from "nonexistent"; }'})
	calls: list[tuple] = []

	def on_failure(failure, path, relative_to):
		calls.append((failure, path, relative_to))

	CssModules(src, tmp_path / "out", on_module_resolution_failure=on_failure).build_sync()
	assert len(calls) == 1
	failure, path, relative_to = calls[0]
	assert isinstance(failure, ModuleResolutionError)
	assert path == "nonexistent"
	assert relative_to.endswith("foo.css")
	assert (tmp_path / "out" / "foo.css").read_text() == css_output("foo.css", ["._foo__abc { }"])


def test_missing_symbol_handler_is_invoked(tmp_path: Path) -> None:
	src = write_tree(
		tmp_path / "in",
		{"foo.css": '.abc { composes: def from "bar.css"; }', "bar.css": ".foo {}"},
	)
	calls: list[tuple[str, str, str]] = []
	CssModules(
		src,
		tmp_path / "out",
		on_import_resolution_failure=lambda symbol, path, relative_to: calls.append((symbol, path, relative_to)),
	).build_sync()
	assert len(calls) == 1
	symbol, path, relative_to = calls[0]
	assert (symbol, path) == ("def", "bar.css")
	assert relative_to.endswith("foo.css")
	assert (tmp_path / "out" / "foo.js").read_text() == js_output({"abc": "_foo__abc undefined"})


def test_syntax_error_in_imported_module_propagates_through_handler(tmp_path: Path) -> None:
	src = write_tree(
		tmp_path / "in",
		{"foo.css": '.abc { composes: x from "./broken.css"; }', "broken.css": ".x {"},
	)
	handled: list = []
	with pytest.raises(CssSyntaxError):
		CssModules(
			src,
			tmp_path / "out",
			on_module_resolution_failure=lambda failure, path, relative_to: handled.append(failure),
		).build_sync()
	assert handled == []


def test_plugins_list_runs_after_core_passes(tmp_path: Path) -> None:
	src = write_tree(tmp_path / "in", {"entry.css": ".class { color: green; }"})
	seen: list[str] = []

	def recolor(root, result):
		for rule in root.walk_rules():
			for decl in rule.walk_decls("color"):
				seen.append(rule.selector)
				decl.value = "blue"

	CssModules(src, tmp_path / "out", plugins=[recolor]).build_sync()
	assert seen == ["._entry__class"]
	assert (tmp_path / "out" / "entry.css").read_text() == css_output("entry.css", ["._entry__class { color: blue; }"])


def test_before_and_after_plugin_stages(tmp_path: Path) -> None:
	src = write_tree(
		tmp_path / "in",
		{
			"constants.css": "@value superbold: 800;",
			"entry.css": '@value superbold from "constants.css";\n.class { color: green; font-weight: superbold; }',
		},
	)
	before_seen: list[tuple[str, str, str]] = []
	after_seen: list[tuple[str, str, str]] = []

	def before(root, result):
		for rule in root.walk_rules():
			for decl in rule.walk_decls():
				before_seen.append((rule.selector, decl.prop, decl.value))
				if decl.prop == "color":
					decl.value = "blue"

	async def after(root, result):
		for rule in root.walk_rules():
			for decl in rule.walk_decls():
				after_seen.append((rule.selector, decl.prop, decl.value))
				if decl.prop == "color":
					decl.value = "red"

	CssModules(src, tmp_path / "out", plugins=PluginStages(before=[before], after=[after])).build_sync()
	assert (".class", "color", "green") in before_seen
	assert (".class", "font-weight", "superbold") in before_seen
	assert ("._entry__class", "color", "blue") in after_seen
	assert ("._entry__class", "font-weight", "800") in after_seen
	assert read_tree(tmp_path / "out") == {
		"constants.css": css_output("constants.css", []),
		"constants.js": js_output({"superbold": "800"}),
		"entry.css": css_output("entry.css", ["._entry__class { color: red; font-weight: 800; }"]),
		"entry.js": js_output({"superbold": "800", "class": "_entry__class"}),
	}


def test_plugins_receive_relative_from(tmp_path: Path) -> None:
	src = write_tree(
		tmp_path / "in",
		{
			"dependency.css": "@value file-name: FILE_NAME;",
			"entry.css": (
				"@value file-name: FILE_NAME;\n"
				'@value file-name as dependency-file-name from "dependency.css";\n'
				".class { file-name: file-name; dependency-file-name: dependency-file-name; }"
			),
		},
	)

	def stamp(root, result):
		for at in root.walk_at_rules("value"):
			at.params = at.params.replace("FILE_NAME", result.opts["relative_from"])

	def sign(root, result):
		note = Comment(text=result.opts["relative_from"])
		note.raws["before"] = "\n"
		root.append(note)

	CssModules(src, tmp_path / "out", plugins={"before": [stamp], "after": [sign]}).build_sync()
	assert read_tree(tmp_path / "out") == {
		"dependency.css": css_output("dependency.css", ["", "/* dependency.css */"]),
		"dependency.js": js_output({"file-name": "dependency.css"}),
		"entry.css": css_output(
			"entry.css",
			[
				"._entry__class { file-name: entry.css; dependency-file-name: dependency.css; }",
				"/* entry.css */",
			],
		),
		"entry.js": js_output(
			{"file-name": "entry.css", "dependency-file-name": "dependency.css", "class": "_entry__class"}
		),
	}


def _mapped(css: str, source_map: dict) -> str:
	payload = base64.b64encode(json.dumps(source_map, separators=(",", ":")).encode("utf-8")).decode("ascii")
	return f"{css}\n/*# sourceMappingURL=data:application/json;base64,{payload} */"


def test_source_maps_are_inlined(tmp_path: Path) -> None:
	src = write_tree(tmp_path / "in", {"base.css": ".green {}"})
	CssModules(src, tmp_path / "out", enable_source_maps=True).build_sync()
	assert read_tree(tmp_path / "out") == {
		"base.css": _mapped(
			"._base__green {}",
			{
				"version": 3,
				"sources": ["base.css"],
				"names": [],
				"mappings": "AAAA,gBAAS",
				"file": "base.css",
				"sourcesContent": [".green {}"],
			},
		),
		"base.js": js_output({"green": "_base__green"}),
	}


def test_source_map_base_dir(tmp_path: Path) -> None:
	src = write_tree(tmp_path / "in", {"foo": {"bar": {"baz": {"base.css": ".green {}"}}}})
	CssModules(src, tmp_path / "out", enable_source_maps=True, source_map_base_dir="foo/bar").build_sync()
	out = read_tree(tmp_path / "out")["foo"]["bar"]["baz"]
	assert out == {
		"base.css": _mapped(
			"._foo_bar_baz_base__green {}",
			{
				"version": 3,
				"sources": ["baz/base.css"],
				"names": [],
				"mappings": "AAAA,4BAAS",
				"file": "baz/base.css",
				"sourcesContent": [".green {}"],
			},
		),
		"base.js": js_output({"green": "_foo_bar_baz_base__green"}),
	}


def test_shared_dependency_is_loaded_once(tmp_path: Path) -> None:
	src = write_tree(
		tmp_path / "in",
		{
			"a.css": '.a { composes: b from "./b.css"; composes: c from "./c.css"; }',
			"b.css": '.b { composes: d from "./d.css"; }',
			"c.css": '.c { composes: d from "./d.css"; }',
			"d.css": ".d { color: red; }",
		},
	)
	loads: list[str] = []

	def record(root, result):
		loads.append(result.opts["relative_from"])

	modules = CssModules(src, tmp_path / "out", plugins={"before": [record]})
	modules.build_sync()
	assert sorted(loads) == ["a.css", "b.css", "c.css", "d.css"]
	assert modules.cache.started == 4
	assert (tmp_path / "out" / "a.js").read_text() == js_output({"a": "_a__a _b__b _d__d _c__c _d__d"})


def test_rebuild_starts_from_an_empty_cache(tmp_path: Path) -> None:
	src = write_tree(tmp_path / "in", {"foo.css": ".abc {}"})
	modules = CssModules(src, tmp_path / "out")
	modules.build_sync()
	(src / "foo.css").write_text(".xyz {}")
	modules.build_sync()
	assert (tmp_path / "out" / "foo.js").read_text() == js_output({"xyz": "_foo__xyz"})
