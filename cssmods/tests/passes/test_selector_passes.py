# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""local_by_default and scope."""

from __future__ import annotations

import asyncio

import pytest

from cssmods.errors import CssSyntaxError
from cssmods.parser.ast import Declaration, Rule
from cssmods.passes import local_by_default, scope
from cssmods.passes.local_by_default import localize_selector
from cssmods.processor import Processor


def _run(passes, source: str, *, file: str = "foo.css"):
	return asyncio.run(Processor(passes).process(source, {"from": file}))


def _exports(root) -> dict[str, str]:
	out: dict[str, str] = {}
	for node in root.nodes:
		if isinstance(node, Rule) and node.selector == ":export":
			for decl in node.nodes:
				if isinstance(decl, Declaration):
					out[decl.prop] = decl.value
	return out


@pytest.mark.parametrize(
	"selector, expected",
	[
		(".a", ":local(.a)"),
		("#main .a:hover", ":local(#main) :local(.a):hover"),
		(".a :global(.b) .c", ":local(.a) .b :local(.c)"),
		(":global .a .b", ".a .b"),
		(".a :global .b", ":local(.a) .b"),
		(":global(.a) .b", ".a :local(.b)"),
		(".a, .b", ":local(.a), :local(.b)"),
		('a[href=".x"] .y', 'a[href=".x"] :local(.y)'),
		(".a:not(.b)", ":local(.a):not(:local(.b))"),
		("div > p", "div > p"),
	],
)
def test_localize_selector(selector: str, expected: str) -> None:
	assert localize_selector(selector) == expected


def test_global_mode_only_marks_explicit_locals() -> None:
	assert localize_selector(".a :local(.b)", local=False) == ".a :local(.b)"
	assert localize_selector(".a :local .b", local=False) == ".a :local(.b)"


def test_local_by_default_handles_keyframes_and_animations() -> None:
	result = _run(
		[local_by_default()],
		"@keyframes spin { from { opacity: 0 } }\n"
		".a { animation: spin 1s infinite; animation-name: :global(fade), pulse; }",
	)
	assert str(result.root) == (
		"@keyframes :local(spin) { from { opacity: 0 } }\n"
		":local(.a) { animation: :local(spin) 1s infinite; animation-name: fade, :local(pulse); }"
	)


def test_local_by_default_skips_icss_rules() -> None:
	result = _run([local_by_default()], ':import("x.css") { a: b; }\n:export { c: d; }')
	assert str(result.root) == ':import("x.css") { a: b; }\n:export { c: d; }'


def test_local_by_default_rejects_unknown_mode() -> None:
	with pytest.raises(ValueError, match="unsupported"):
		local_by_default("pure")


def test_scope_renames_and_exports_classes() -> None:
	result = _run([local_by_default(), scope()], ".a { color: red; }\n#b .a {}")
	assert result.root.nodes[0].selector == "._foo__a"
	assert result.root.nodes[1].selector == "#_foo__b ._foo__a"
	assert _exports(result.root) == {"a": "_foo__a", "b": "_foo__b"}


def test_scope_composition_within_a_file() -> None:
	result = _run(
		[local_by_default(), scope()],
		".b { composes: a; margin: 0; }\n.a { color: red; }\n.c, .d { composes: b global(x); }",
	)
	assert _exports(result.root) == {
		"b": "_foo__b _foo__a",
		"a": "_foo__a",
		"c": "_foo__c _foo__b _foo__a x",
		"d": "_foo__d _foo__b _foo__a x",
	}
	assert str(result.root.nodes[0]) == "._foo__b { margin: 0; }"


def test_scope_rejects_composition_on_compound_selector() -> None:
	with pytest.raises(CssSyntaxError, match="composition is only allowed") as excinfo:
		_run([local_by_default(), scope()], ".a .b { composes: c; }\n.c {}")
	assert excinfo.value.reason_code == "invalid-composition"


def test_scope_rejects_unknown_composed_class() -> None:
	with pytest.raises(CssSyntaxError, match='referenced class name "nope"'):
		_run([local_by_default(), scope()], ".a { composes: nope; }")


def test_scope_passes_exact_rule_text_to_generator() -> None:
	calls: list[tuple[str, str, str]] = []

	def generate(name: str, path: str, rule_text: str) -> str:
		calls.append((name, path, rule_text))
		return f"x-{name}"

	result = _run([local_by_default(), scope(generate)], ".one { color: red; }\n\n.two,\n.three {\n}", file="/in/f.css")
	assert calls == [
		("one", "/in/f.css", ".one { color: red; }"),
		("two", "/in/f.css", ".two,\n.three {\n}"),
		("three", "/in/f.css", ".two,\n.three {\n}"),
	]
	assert result.root.nodes[1].selector == ".x-two,\n.x-three"


def test_scope_localizes_values_marked_local() -> None:
	result = _run([scope()], ".a { will-change: :local(spin); }")
	assert str(result.root.nodes[0]) == ".a { will-change: _foo__spin; }"
	assert _exports(result.root) == {"spin": "_foo__spin"}
