# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Parsers for call patterns and delegation manifests.

A call pattern is plain call syntax naming the public function and its
positional parameters: `put(opts, key, value)`.

A manifest is a list of delegation requests:

	# comment
	delegate trim(s), pad(s, width) to text.strings
	delegate put(opts, key, value) to maps.core append_first
	delegate g(a, b) to pkg.m as f

Options may appear in any order after the patterns. The manifest grammar only
captures each pattern's raw text; the pattern itself is decomposed by the call
grammar so a malformed pattern is reported by name.
"""

from __future__ import annotations

import keyword
from dataclasses import dataclass, field
from typing import Any

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedInput

from facadegen.errors import ConfigurationError, InvalidCallSyntax, ManifestSyntaxError

_CALL_GRAMMAR = r"""
call: NAME "(" [params] ")"
    | NAME                     -> bare_call
params: NAME ("," NAME)* [","]

%import common.CNAME -> NAME
%import common.WS
%ignore WS
"""

_MANIFEST_GRAMMAR = r"""
start: statement*
statement: "delegate" call_list option*
call_list: CALL_TEXT ("," CALL_TEXT)*
option: "to" dotted            -> opt_to
      | "as" NAME              -> opt_as
      | "append_first"         -> opt_append_first
dotted: NAME ("." NAME)*

CALL_TEXT: /[A-Za-z_][A-Za-z0-9_]*[ \t]*\([^()\n]*\)/
COMMENT: /#[^\n]*/

%import common.CNAME -> NAME
%import common.WS
%ignore WS
%ignore COMMENT
"""

_CALL_PARSER = Lark(
	_CALL_GRAMMAR,
	parser="lalr",
	start="call",
	maybe_placeholders=False,
)

_MANIFEST_PARSER = Lark(
	_MANIFEST_GRAMMAR,
	parser="lalr",
	start="start",
	propagate_positions=True,
	maybe_placeholders=False,
)


@dataclass(frozen=True)
class CallPattern:
	"""A single delegation request: public name plus positional parameters."""

	name: str
	params: tuple[str, ...] = ()

	@property
	def arity(self) -> int:
		return len(self.params)

	def __str__(self) -> str:
		return f"{self.name}({', '.join(self.params)})"


def _name(node: Tree) -> str:
	return str(node.data)


def _pos(value: object) -> int | None:
	# lark reports unknown positions as -1 or "?"
	return value if isinstance(value, int) and value > 0 else None


def parse_call_pattern(text: str) -> CallPattern:
	"""
	Decompose `text` into a `CallPattern`.

	Raises `InvalidCallSyntax` naming the pattern when the text is not a
	simple call with identifier arguments, uses a keyword, or repeats a
	parameter name.
	"""
	if not isinstance(text, str):
		raise InvalidCallSyntax(message=f"call pattern must be a string, got {type(text).__name__}", pattern=repr(text))
	try:
		tree = _CALL_PARSER.parse(text)
	except UnexpectedInput as err:
		raise InvalidCallSyntax(
			message=f"invalid syntax in delegation pattern {text.strip()!r}",
			pattern=text.strip(),
			line=_pos(err.line),
			column=_pos(err.column),
		) from err
	tokens = [tree.children[0]]
	if _name(tree) == "call" and len(tree.children) > 1:
		tokens.extend(tok for tok in tree.children[1].children if isinstance(tok, Token))
	name = str(tokens[0])
	params = tuple(str(tok) for tok in tokens[1:])
	for ident in (name, *params):
		if keyword.iskeyword(ident):
			raise InvalidCallSyntax(message=f"{ident!r} is a reserved keyword", pattern=text.strip())
	seen: set[str] = set()
	for param in params:
		if param in seen:
			raise InvalidCallSyntax(message=f"duplicate parameter {param!r}", pattern=text.strip())
		seen.add(param)
	return CallPattern(name=name, params=params)


@dataclass(frozen=True)
class DelegationRequest:
	"""One `delegate ...` statement: raw patterns plus its option mapping."""

	patterns: tuple[str, ...]
	options: dict[str, Any] = field(default_factory=dict)
	line: int | None = None


@dataclass(frozen=True)
class DelegationManifest:
	requests: tuple[DelegationRequest, ...]
	path: str | None = None


def _build_statement(node: Tree, path: str | None) -> DelegationRequest:
	line = getattr(node.meta, "line", None)
	patterns: list[str] = []
	options: dict[str, Any] = {}
	for child in node.children:
		if not isinstance(child, Tree):
			continue
		kind = _name(child)
		if kind == "call_list":
			patterns.extend(str(tok) for tok in child.children if isinstance(tok, Token))
			continue
		if kind == "opt_to":
			key, value = "to", ".".join(str(tok) for tok in child.children[0].children)
		elif kind == "opt_as":
			key, value = "as", str(child.children[0])
		elif kind == "opt_append_first":
			key, value = "append_first", True
		else:
			raise AssertionError(f"unexpected manifest node {kind}")
		if key in options:
			raise ConfigurationError(
				message=f"duplicate option {key!r} in delegate statement",
				path=path,
				line=getattr(child.meta, "line", line),
				column=getattr(child.meta, "column", None),
			)
		options[key] = value
	return DelegationRequest(patterns=tuple(patterns), options=options, line=line)


def parse_manifest(text: str, *, path: str | None = None) -> DelegationManifest:
	try:
		tree = _MANIFEST_PARSER.parse(text)
	except UnexpectedInput as err:
		raise ManifestSyntaxError(
			message=f"unexpected input in delegation manifest: {err.get_context(text).strip()!r}",
			path=path,
			line=_pos(err.line),
			column=_pos(err.column),
		) from err
	requests = [_build_statement(child, path) for child in tree.children if isinstance(child, Tree)]
	return DelegationManifest(requests=tuple(requests), path=path)


__all__ = [
	"CallPattern",
	"DelegationManifest",
	"DelegationRequest",
	"parse_call_pattern",
	"parse_manifest",
]
