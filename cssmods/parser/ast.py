# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Stylesheet tree.

Nodes keep the whitespace/punctuation they were parsed with in `raws` so an
untouched tree serializes back to the exact input. Keys used:

- `before`: text between the previous sibling (or block start) and the node
- `between`: rule/at-rule text before `{`; declaration separator incl. `:`
- `after`: text between the last child and `}` (root: trailing text)
- `semicolon`: whether the last child of a block was terminated by `;`
- `after_name`: at-rule text between the name and params
- `important`: raw `!important` text when it differs from ` !important`
- `value_after`: declaration whitespace between the value and `;`
- `left` / `right`: comment padding inside the delimiters
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Iterator, List, Optional

from cssmods.core.span import Span


@dataclass
class SourceInput:
	"""Original text of one parsed stylesheet."""

	css: str
	file: Optional[str] = None


@dataclass(eq=False)
class Node:
	type: ClassVar[str] = "node"

	raws: dict[str, Any] = field(default_factory=dict, kw_only=True)
	source: Optional[Span] = field(default=None, kw_only=True)
	parent: Optional["Container"] = field(default=None, kw_only=True, repr=False)

	def remove(self) -> None:
		if self.parent is not None:
			self.parent.remove_child(self)

	def root(self) -> "Node":
		node: Node = self
		while node.parent is not None:
			node = node.parent
		return node

	def source_text(self) -> Optional[str]:
		"""Exact input text this node was parsed from, if known."""
		top = self.root()
		inp = getattr(top, "input", None)
		if inp is None or self.source is None:
			return None
		if self.source.start_pos is None or self.source.end_pos is None:
			return None
		return inp.css[self.source.start_pos:self.source.end_pos]

	def __str__(self) -> str:
		from cssmods.parser.stringify import stringify

		return stringify(self)


@dataclass(eq=False)
class Container(Node):
	nodes: Optional[List[Node]] = field(default_factory=list, kw_only=True)

	def __post_init__(self) -> None:
		for child in self.nodes or ():
			child.parent = self

	@property
	def first(self) -> Optional[Node]:
		return self.nodes[0] if self.nodes else None

	@property
	def last(self) -> Optional[Node]:
		return self.nodes[-1] if self.nodes else None

	def _adopt(self, nodes: tuple[Node, ...]) -> None:
		if self.nodes is None:
			self.nodes = []
		for child in nodes:
			if child.parent is not None and child.parent is not self:
				child.parent.remove_child(child)
			child.parent = self

	def append(self, *nodes: Node) -> "Container":
		self._adopt(nodes)
		assert self.nodes is not None
		self.nodes.extend(nodes)
		return self

	def prepend(self, *nodes: Node) -> "Container":
		self._adopt(nodes)
		assert self.nodes is not None
		self.nodes[0:0] = list(nodes)
		return self

	def remove_child(self, child: Node) -> None:
		if self.nodes is None:
			return
		for idx, node in enumerate(self.nodes):
			if node is child:
				del self.nodes[idx]
				child.parent = None
				return

	def each(self) -> Iterator[Node]:
		"""Iterate direct children; safe against removal during iteration."""
		yield from list(self.nodes or ())

	def walk(self) -> Iterator[Node]:
		"""Depth-first pre-order walk over all descendants."""
		for child in list(self.nodes or ()):
			yield child
			if isinstance(child, Container):
				yield from child.walk()

	def walk_rules(self) -> Iterator["Rule"]:
		for node in self.walk():
			if isinstance(node, Rule):
				yield node

	def walk_decls(self, prop: Optional[str] = None) -> Iterator["Declaration"]:
		for node in self.walk():
			if isinstance(node, Declaration) and (prop is None or node.prop == prop):
				yield node

	def walk_at_rules(self, name: Optional[str] = None) -> Iterator["AtRule"]:
		for node in self.walk():
			if isinstance(node, AtRule) and (name is None or node.name.lower() == name):
				yield node


@dataclass(eq=False)
class Root(Container):
	type: ClassVar[str] = "root"

	input: Optional[SourceInput] = field(default=None, kw_only=True, repr=False)

	def prepend(self, *nodes: Node) -> "Container":
		# The old first node is no longer first; give it the spacing of its neighbour.
		if nodes and self.nodes:
			first = self.nodes[0]
			if len(self.nodes) > 1 and "before" in self.nodes[1].raws:
				first.raws["before"] = self.nodes[1].raws["before"]
			else:
				first.raws.pop("before", None)
		return super().prepend(*nodes)

	def remove_child(self, child: Node) -> None:
		# The next node inherits the leading whitespace of a removed first node.
		if self.nodes and self.nodes[0] is child and len(self.nodes) > 1:
			next_node = self.nodes[1]
			if "before" in child.raws:
				next_node.raws["before"] = child.raws["before"]
			else:
				next_node.raws.pop("before", None)
		super().remove_child(child)


@dataclass(eq=False)
class Rule(Container):
	type: ClassVar[str] = "rule"

	selector: str = ""


@dataclass(eq=False)
class AtRule(Container):
	"""`@name params;` (nodes is None) or `@name params { ... }`."""

	type: ClassVar[str] = "atrule"

	name: str = ""
	params: str = ""
	nodes: Optional[List[Node]] = field(default=None, kw_only=True)


@dataclass(eq=False)
class Declaration(Node):
	type: ClassVar[str] = "decl"

	prop: str = ""
	value: str = ""
	important: bool = False


@dataclass(eq=False)
class Comment(Node):
	type: ClassVar[str] = "comment"

	text: str = ""


__all__ = [
	"AtRule",
	"Comment",
	"Container",
	"Declaration",
	"Node",
	"Root",
	"Rule",
	"SourceInput",
]
