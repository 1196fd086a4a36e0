# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Command line front end: `python -m cssmods build INPUT OUTPUT`.

Build errors are reported as `file:line:column: error: message` on stderr
(or a JSON payload on stdout with `--json`) and exit with status 1.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from cssmods.builder import CssModules
from cssmods.config import BuildOptions, load_config_json
from cssmods.errors import CssModulesError, CssSyntaxError, ModuleResolutionError


def _build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(prog="cssmods", description="CSS-modules build: scope class names and emit export tables")
	p.add_argument("-v", "--verbose", action="count", default=0, help="Log progress (-v) or cache/link details (-vv)")
	sub = p.add_subparsers(dest="cmd", required=True)

	build = sub.add_parser("build", help="Process a directory of stylesheets into an output directory")
	build.add_argument("input", type=Path, help="Input root directory")
	build.add_argument("output", type=Path, help="Output root directory")
	build.add_argument("--config", type=Path, default=None, help="JSON config file (extension, encoding, virtualModules, ...)")
	build.add_argument("--extension", type=str, default=None, help="Stylesheet extension without the dot (default: css)")
	build.add_argument("--encoding", type=str, default=None, help="Text encoding for reads and writes (default: utf-8)")
	build.add_argument("--source-maps", action="store_true", help="Emit inline source maps")
	build.add_argument("--source-map-base-dir", type=str, default=None, help="Directory (under INPUT) map sources are relative to")
	build.add_argument("--json", action="store_true", help="Emit machine-readable JSON diagnostics")
	return p


def _phase_for(err: BaseException) -> str:
	if isinstance(err, CssSyntaxError):
		return "parser"
	if isinstance(err, ModuleResolutionError):
		return "resolve"
	return "build"


def _error_file(err: CssModulesError) -> str | None:
	# an unreadable top-level module has no importing file; name the module itself
	if isinstance(err, ModuleResolutionError) and err.file is None:
		return err.path
	return err.file


def _error_to_json(err: BaseException, default_file: str | None = None) -> dict:
	"""Render a build failure to a structured JSON-friendly dict."""
	file = default_file
	line = None
	column = None
	code = None
	message = str(err)
	if isinstance(err, CssModulesError):
		file = _error_file(err) or default_file
		code = err.reason_code
		message = err.message
	if isinstance(err, CssSyntaxError):
		line = err.line
		column = err.column
	out = {
		"phase": _phase_for(err),
		"reason_code": code,
		"message": message,
		"severity": "error",
		"file": file,
		"line": line,
		"column": column,
	}
	if isinstance(err, ModuleResolutionError):
		out["import_path"] = err.import_path
	return out


def _format_error(err: BaseException, default_file: str) -> str:
	if isinstance(err, CssSyntaxError) and err.span is not None:
		return f"{err.span.file or default_file}:{err.line}:{err.column}: error: {err.message}"
	if isinstance(err, CssModulesError):
		return f"{_error_file(err) or default_file}:?:?: error: {err.message}"
	return f"{default_file}:?:?: error: {err}"


def _configure_logging(verbose: int) -> None:
	if verbose <= 0:
		return
	level = logging.INFO if verbose == 1 else logging.DEBUG
	logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def _report(err: BaseException, default_file: str, as_json: bool) -> int:
	if as_json:
		print(json.dumps({"exit_code": 1, "diagnostics": [_error_to_json(err, default_file)]}))
	else:
		print(_format_error(err, default_file), file=sys.stderr)
	return 1


def main(argv: list[str] | None = None) -> int:
	p = _build_parser()
	args = p.parse_args(argv)
	_configure_logging(args.verbose)

	if args.cmd == "build":
		opts = BuildOptions()
		if args.config is not None:
			try:
				opts = load_config_json(args.config, opts)
			except (OSError, ValueError) as err:
				return _report(err, str(args.config), args.json)
		if args.extension is not None:
			opts.extension = args.extension.lstrip(".")
		if args.encoding is not None:
			opts.encoding = args.encoding
		if args.source_maps:
			opts.enable_source_maps = True
		if args.source_map_base_dir is not None:
			opts.source_map_base_dir = args.source_map_base_dir

		if not args.input.is_dir():
			return _report(NotADirectoryError(f"input is not a directory: {args.input}"), str(args.input), args.json)

		builder = CssModules(args.input, args.output, opts)
		try:
			builder.build_sync()
		except (CssModulesError, OSError, UnicodeError) as err:
			return _report(err, str(args.input), args.json)
		if args.json:
			print(json.dumps({"exit_code": 0, "diagnostics": []}))
		return 0

	raise AssertionError("unreachable")


if __name__ == "__main__":
	sys.exit(main())
