# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Convert Python annotation syntax (`ast` expressions) into type-expression
trees. Nothing is evaluated; names are kept exactly as written.
"""

from __future__ import annotations

import ast

from facadegen.metadata.types import (
	AnyType,
	LiteralValue,
	NamedType,
	OpaqueType,
	TypeExpr,
	TypeList,
	UnionType,
)

_LITERAL_NAMES = {"Literal", "typing.Literal", "typing_extensions.Literal"}


def _dotted_name(node: ast.expr) -> str | None:
	if isinstance(node, ast.Name):
		return node.id
	if isinstance(node, ast.Attribute):
		base = _dotted_name(node.value)
		if base is None:
			return None
		return f"{base}.{node.attr}"
	return None


def _flatten_union(node: ast.expr) -> list[ast.expr]:
	if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
		return _flatten_union(node.left) + _flatten_union(node.right)
	return [node]


def _literal_arg(node: ast.expr) -> TypeExpr:
	if isinstance(node, ast.Constant) and (node.value is None or isinstance(node.value, (str, int, bool))):
		return LiteralValue(value=node.value)
	if isinstance(node, ast.UnaryOp) and isinstance(node.op, ast.USub) and isinstance(node.operand, ast.Constant):
		if isinstance(node.operand.value, int) and not isinstance(node.operand.value, bool):
			return LiteralValue(value=-node.operand.value)
	return annotation_to_type(node)


def annotation_to_type(node: ast.expr | None) -> TypeExpr:
	"""
	Translate one annotation expression.

	`None` (no annotation) becomes `AnyType`. String annotations are parsed
	and translated recursively; unparseable strings become `OpaqueType`.
	"""
	if node is None:
		return AnyType()
	if isinstance(node, ast.Constant):
		if node.value is None:
			return NamedType("None")
		if node.value is Ellipsis:
			return NamedType("...")
		if isinstance(node.value, str):
			try:
				inner = ast.parse(node.value.strip(), mode="eval").body
			except SyntaxError:
				return OpaqueType(text=node.value)
			return annotation_to_type(inner)
		return OpaqueType(text=ast.unparse(node))
	name = _dotted_name(node)
	if name is not None:
		return NamedType(name)
	if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
		return UnionType(members=tuple(annotation_to_type(m) for m in _flatten_union(node)))
	if isinstance(node, ast.List):
		return TypeList(items=tuple(annotation_to_type(e) for e in node.elts))
	if isinstance(node, ast.Subscript):
		base = _dotted_name(node.value)
		if base is None:
			return OpaqueType(text=ast.unparse(node))
		raw_args = node.slice.elts if isinstance(node.slice, ast.Tuple) else [node.slice]
		if base in _LITERAL_NAMES:
			return NamedType(base, tuple(_literal_arg(a) for a in raw_args))
		return NamedType(base, tuple(annotation_to_type(a) for a in raw_args))
	return OpaqueType(text=ast.unparse(node))


__all__ = ["annotation_to_type"]
