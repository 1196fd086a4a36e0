# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Tree serializer.

Every piece of output goes through a `builder(text, node, kind)` callback;
`kind` is "start"/"end" for the two halves of a block and None otherwise. The
plain serializer just concatenates; the source-map generator uses the node
and kind to record positions.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from cssmods.parser.ast import AtRule, Comment, Container, Declaration, Node, Root, Rule

Builder = Callable[[str, Optional[Node], Optional[str]], None]

# Fallbacks for nodes synthesized by passes (parsed nodes always carry raws).
_DEFAULT_RAWS: dict[str, Any] = {
	"colon": ": ",
	"indent": "  ",
	"before_open": " ",
	"empty_body": "",
	"comment_left": " ",
	"comment_right": " ",
}


def _depth(node: Node) -> int:
	depth = 0
	parent = node.parent
	while parent is not None and not isinstance(parent, Root):
		depth += 1
		parent = parent.parent
	return depth


class Stringifier:
	def __init__(self, builder: Builder) -> None:
		self.builder = builder

	def stringify(self, node: Node, semicolon: bool = False) -> None:
		if isinstance(node, Root):
			self.root(node)
		elif isinstance(node, Rule):
			self.rule(node)
		elif isinstance(node, AtRule):
			self.atrule(node, semicolon)
		elif isinstance(node, Declaration):
			self.decl(node, semicolon)
		elif isinstance(node, Comment):
			self.comment(node)
		else:
			raise TypeError(f"cannot stringify {type(node).__name__}")

	def root(self, node: Root) -> None:
		self.body(node)
		after = node.raws.get("after")
		if after:
			self.builder(after, None, None)

	def comment(self, node: Comment) -> None:
		left = node.raws.get("left", _DEFAULT_RAWS["comment_left"])
		right = node.raws.get("right", _DEFAULT_RAWS["comment_right"])
		self.builder(f"/*{left}{node.text}{right}*/", node, None)

	def decl(self, node: Declaration, semicolon: bool) -> None:
		out = node.prop + node.raws.get("between", _DEFAULT_RAWS["colon"]) + node.value
		if node.important:
			out += node.raws.get("important", " !important")
		out += node.raws.get("value_after", "")
		if semicolon:
			out += ";"
		self.builder(out, node, None)

	def rule(self, node: Rule) -> None:
		self.block(node, node.selector + node.raws.get("between", _DEFAULT_RAWS["before_open"]))

	def atrule(self, node: AtRule, semicolon: bool) -> None:
		name = "@" + node.name
		if node.params:
			name += node.raws.get("after_name", " ") + node.params
		else:
			name += node.raws.get("after_name", "")
		if node.nodes is not None:
			self.block(node, name + node.raws.get("between", _DEFAULT_RAWS["before_open"]))
			return
		end = node.raws.get("between", "") + (";" if semicolon else "")
		self.builder(name + end, node, None)

	def block(self, node: Container, start: str) -> None:
		self.builder(start + "{", node, "start")
		if node.nodes:
			self.body(node)
			after = node.raws.get("after")
			if after is None:
				after = "\n" + _DEFAULT_RAWS["indent"] * _depth(node)
		else:
			after = node.raws.get("after", _DEFAULT_RAWS["empty_body"])
		if after:
			self.builder(after, None, None)
		self.builder("}", node, "end")

	def body(self, node: Container) -> None:
		nodes = node.nodes or []
		last = len(nodes) - 1
		while last > 0 and isinstance(nodes[last], Comment):
			last -= 1
		semicolon = bool(node.raws.get("semicolon", False))
		for idx, child in enumerate(nodes):
			before = self._before(child, idx)
			if before:
				self.builder(before, None, None)
			self.stringify(child, last != idx or semicolon)

	def _before(self, child: Node, idx: int) -> str:
		before = child.raws.get("before")
		if before is not None:
			return before
		if isinstance(child.parent, Root):
			# A synthesized first node of a stylesheet prints no leading whitespace.
			return "" if idx == 0 else "\n"
		return "\n" + _DEFAULT_RAWS["indent"] * _depth(child)


def stringify(node: Node) -> str:
	parts: list[str] = []
	Stringifier(lambda text, _node, _kind: parts.append(text)).stringify(node)
	return "".join(parts)


__all__ = ["Builder", "Stringifier", "stringify"]
