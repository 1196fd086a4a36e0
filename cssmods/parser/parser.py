# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import re
from pathlib import Path
from typing import List, Optional

from lark import Lark, Token
from lark.exceptions import UnexpectedInput

from cssmods.core.span import Span
from cssmods.errors import CssSyntaxError
from cssmods.parser.ast import AtRule, Comment, Container, Declaration, Node, Root, Rule, SourceInput

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_LEXER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="basic",
	start="start",
	propagate_positions=True,
	maybe_placeholders=False,
)

_IMPORTANT = re.compile(r"(\s*!\s*important)$", re.IGNORECASE)

# Tokens that end a statement at paren depth 0.
_STOP = {"SEMI", "LBRACE", "RBRACE"}


def tokenize(source: str, *, file: Optional[str] = None) -> List[Token]:
	"""Lex stylesheet source into raw tokens (whitespace and comments included)."""
	try:
		return list(_LEXER.lex(source))
	except UnexpectedInput as err:
		span = Span(file=file, line=getattr(err, "line", None), column=getattr(err, "column", None))
		raise CssSyntaxError.at("Unknown word", span) from err


def _text(tokens: List[Token]) -> str:
	return "".join(tok.value for tok in tokens)


def _split_trailing_ws(tokens: List[Token]) -> tuple[List[Token], str]:
	end = len(tokens)
	while end > 0 and tokens[end - 1].type == "WS":
		end -= 1
	return tokens[:end], _text(tokens[end:])


def _split_leading_ws(tokens: List[Token]) -> tuple[str, List[Token]]:
	start = 0
	while start < len(tokens) and tokens[start].type == "WS":
		start += 1
	return _text(tokens[:start]), tokens[start:]


class _TreeBuilder:
	"""
	Builds a Root from the token stream.

	The shape follows postcss: a statement is a rule when it reaches `{`
	before `;`/`}`, otherwise a declaration. Whitespace is accumulated in
	`spaces` and attached to the next node as `before` (or to the enclosing
	block as `after`).
	"""

	def __init__(self, source: str, file: Optional[str]) -> None:
		self.file = file
		self.tokens = tokenize(source, file=file)
		self.pos = 0
		self.spaces = ""
		self.semicolon = False
		self.root = Root(
			input=SourceInput(css=source, file=file),
			source=Span(file=file, line=1, column=1, start_pos=0, end_pos=len(source)),
		)
		self.current: Container = self.root

	def _span(self, tok: Token) -> Span:
		return Span.from_token(tok, file=self.file)

	def _init(self, node: Node) -> None:
		node.raws["before"] = self.spaces
		self.spaces = ""
		self.current.append(node)
		if not isinstance(node, Comment):
			self.semicolon = False

	def build(self) -> Root:
		while self.pos < len(self.tokens):
			tok = self.tokens[self.pos]
			kind = tok.type
			if kind == "WS":
				self.spaces += tok.value
				self.pos += 1
			elif kind == "COMMENT":
				self._comment(tok)
				self.pos += 1
			elif kind == "RBRACE":
				self._end(tok)
				self.pos += 1
			elif kind == "SEMI":
				self.spaces += tok.value
				self.pos += 1
			elif kind == "AT_WORD":
				self._at_rule(tok)
			else:
				self._other()
		return self._end_file()

	def _comment(self, tok: Token) -> None:
		inner = tok.value[2:-2]
		if inner.strip():
			stripped = inner.strip()
			left = inner[: len(inner) - len(inner.lstrip())]
			right = inner[len(inner.rstrip()):]
		else:
			stripped = ""
			left = inner
			right = ""
		node = Comment(text=stripped, source=self._span(tok))
		node.raws["left"] = left
		node.raws["right"] = right
		self._init(node)

	def _collect(self) -> tuple[List[Token], Optional[Token]]:
		"""Collect tokens up to the next depth-0 `;`, `{` or `}` (not consumed)."""
		depth = 0
		out: List[Token] = []
		while self.pos < len(self.tokens):
			tok = self.tokens[self.pos]
			if depth == 0 and tok.type in _STOP:
				return out, tok
			if tok.type == "LPAR":
				depth += 1
			elif tok.type == "RPAR" and depth:
				depth -= 1
			out.append(tok)
			self.pos += 1
		return out, None

	def _other(self) -> None:
		tokens, stop = self._collect()
		if stop is not None and stop.type == "LBRACE":
			self._rule(tokens, stop)
			return
		self._decl(tokens, stop)

	def _rule(self, tokens: List[Token], brace: Token) -> None:
		selector_toks, between = _split_trailing_ws(tokens)
		node = Rule(selector=_text(selector_toks), source=self._span(tokens[0] if tokens else brace))
		node.raws["between"] = between
		self._init(node)
		self.current = node
		self.pos += 1

	def _decl(self, tokens: List[Token], stop: Optional[Token]) -> None:
		body, trailing = _split_trailing_ws(tokens)
		colon_at = None
		depth = 0
		for idx, tok in enumerate(body):
			if tok.type == "LPAR":
				depth += 1
			elif tok.type == "RPAR" and depth:
				depth -= 1
			elif tok.type == "COLON" and depth == 0:
				colon_at = idx
				break
		if colon_at is None:
			raise CssSyntaxError.at("Unknown word", self._span(body[0]))

		prop_toks, prop_ws = _split_trailing_ws(body[:colon_at])
		if not prop_toks:
			raise CssSyntaxError.at("Unknown word", self._span(body[colon_at]))
		value_ws, value_toks = _split_leading_ws(body[colon_at + 1:])
		value = _text(value_toks)

		node = Declaration(prop=_text(prop_toks), source=self._span(body[0]))
		node.raws["between"] = prop_ws + ":" + value_ws
		m = _IMPORTANT.search(value)
		if m is not None:
			node.important = True
			if m.group(1) != " !important":
				node.raws["important"] = m.group(1)
			value = value[: m.start()]
		node.value = value

		end_tok = body[-1]
		if stop is not None and stop.type == "SEMI":
			node.raws["value_after"] = trailing
			end_tok = stop
		self._init(node)
		node.source = Span.between(node.source, self._span(end_tok))
		if stop is not None and stop.type == "SEMI":
			self.semicolon = True
			self.pos += 1
		else:
			self.spaces += trailing

	def _at_rule(self, name_tok: Token) -> None:
		self.pos += 1
		tokens, stop = self._collect()
		after_name, rest = _split_leading_ws(tokens)
		params_toks, between = _split_trailing_ws(rest)
		node = AtRule(name=name_tok.value[1:], params=_text(params_toks), source=self._span(name_tok))
		node.raws["after_name"] = after_name
		node.raws["between"] = between
		if stop is not None and stop.type == "LBRACE":
			node.nodes = []
			self._init(node)
			self.current = node
			self.pos += 1
			return
		self._init(node)
		end_tok = params_toks[-1] if params_toks else name_tok
		if stop is not None and stop.type == "SEMI":
			end_tok = stop
			self.semicolon = True
			self.pos += 1
		node.source = Span.between(node.source, self._span(end_tok))

	def _end(self, tok: Token) -> None:
		if self.current is self.root:
			raise CssSyntaxError.at("Unexpected }", self._span(tok))
		block = self.current
		if block.nodes:
			block.raws["semicolon"] = self.semicolon
		self.semicolon = False
		block.raws["after"] = self.spaces
		self.spaces = ""
		if block.source is not None:
			block.source = Span.between(block.source, self._span(tok))
		assert block.parent is not None
		self.current = block.parent

	def _end_file(self) -> Root:
		if self.current is not self.root:
			raise CssSyntaxError.at("Unclosed block", self.current.source)
		if self.root.nodes:
			self.root.raws["semicolon"] = self.semicolon
		self.root.raws["after"] = self.spaces
		self.spaces = ""
		return self.root


def parse(source: str, *, file: Optional[str] = None) -> Root:
	"""Parse stylesheet text into a Root. Raises CssSyntaxError on malformed input."""
	return _TreeBuilder(source, file).build()


__all__ = ["parse", "tokenize"]
