# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Pass runner.

A pass is any callable `(root, result)`; it mutates the tree in place and may
return an awaitable, which is awaited before the next pass runs. After the
last pass the tree is serialized (with an inline source map when
`opts["map"]` is set) into `result.css`.

Recognized opts: `from` (module key, also used as the source file name),
`relative_from` (path relative to the build root), `map` (None or a dict
with `annotation` and optional `sources_content`). Anything else is passed
through untouched for plugins.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Union

from cssmods.core.sourcemap import MapGenerator
from cssmods.parser.ast import Root
from cssmods.parser.parser import parse
from cssmods.parser.stringify import stringify

Pass = Callable[[Root, "Result"], Union[None, Awaitable[None]]]


@dataclass
class Result:
	root: Root
	opts: Dict[str, Any] = field(default_factory=dict)
	exports: Dict[str, str] = field(default_factory=dict)
	messages: List[Dict[str, Any]] = field(default_factory=list)
	css: str = ""
	map: Optional[Dict[str, Any]] = None

	def warn(self, text: str, **extra: Any) -> None:
		self.messages.append({"type": "warning", "text": text, **extra})

	def finish(self) -> None:
		map_opts = self.opts.get("map")
		if not map_opts:
			self.css = stringify(self.root)
			self.map = None
			return
		generated = MapGenerator(
			self.root,
			from_path=str(self.opts.get("from") or ""),
			annotation=map_opts["annotation"],
			sources_content=map_opts.get("sources_content", True),
		).generate()
		self.css = generated.css
		self.map = generated.map


class Processor:
	def __init__(self, passes: Iterable[Pass]) -> None:
		self.passes: List[Pass] = list(passes)

	async def process(self, text: str, opts: Optional[Dict[str, Any]] = None) -> Result:
		opts = dict(opts or {})
		root = parse(text, file=opts.get("from"))
		result = Result(root=root, opts=opts)
		for stage in self.passes:
			ret = stage(root, result)
			if inspect.isawaitable(ret):
				await ret
		result.finish()
		return result


__all__ = ["Pass", "Processor", "Result"]
