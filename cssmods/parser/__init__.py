# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Stylesheet parser and serializer.

`parse(text)` returns a Root whose nodes keep every byte of whitespace in
their `raws`, so `stringify(parse(text)) == text` for well-formed input.
"""

from cssmods.parser.ast import AtRule, Comment, Container, Declaration, Node, Root, Rule, SourceInput
from cssmods.parser.parser import parse, tokenize
from cssmods.parser.stringify import stringify

__all__ = [
	"AtRule",
	"Comment",
	"Container",
	"Declaration",
	"Node",
	"Root",
	"Rule",
	"SourceInput",
	"parse",
	"stringify",
	"tokenize",
]
