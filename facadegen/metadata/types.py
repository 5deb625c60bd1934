# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Type-expression trees carried by the `Spec` chunk.

Why this exists
---------------
Signature clauses are mined from one module and re-attached to a function
declared in another one. To do that safely we need a small, self-contained
shape that:
- survives a round trip through the artifact (tagged JSON lists),
- can be rendered back into Python annotation text,
- can be rewritten as a pure tree transformation (rename the root function
  token, realign parameters) without touching source text.

Wire form is a tagged list whose first element is the variant tag:

- `["named", name, [args...]]`     `int`, `list[int]`, `pkg.Point`
- `["union", [members...]]`        `int | None`
- `["lit", value]`                 argument of `Literal[...]`
- `["list", [items...]]`           parameter list of `Callable[[...], R]`
- `["any"]`                        missing annotation
- `["opaque", text]`               anything we do not model
- `["fun", [params...], returns]`  a whole signature clause
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Union


@dataclass(frozen=True)
class NamedType:
	name: str
	args: tuple["TypeExpr", ...] = ()


@dataclass(frozen=True)
class UnionType:
	members: tuple["TypeExpr", ...]


@dataclass(frozen=True)
class LiteralValue:
	value: str | int | bool | None


@dataclass(frozen=True)
class TypeList:
	items: tuple["TypeExpr", ...] = ()


@dataclass(frozen=True)
class AnyType:
	"""An unannotated position."""


@dataclass(frozen=True)
class OpaqueType:
	"""Annotation syntax we do not model; kept verbatim."""

	text: str


@dataclass(frozen=True)
class FunType:
	params: tuple["TypeExpr", ...] = ()
	returns: "TypeExpr" = field(default_factory=AnyType)

	@property
	def arity(self) -> int:
		return len(self.params)


TypeExpr = Union[NamedType, UnionType, LiteralValue, TypeList, AnyType, OpaqueType, FunType]


def encode_type(expr: TypeExpr) -> list[Any]:
	"""Encode a type expression into its tagged JSON-able list form."""
	if isinstance(expr, NamedType):
		return ["named", expr.name, [encode_type(a) for a in expr.args]]
	if isinstance(expr, UnionType):
		return ["union", [encode_type(m) for m in expr.members]]
	if isinstance(expr, LiteralValue):
		return ["lit", expr.value]
	if isinstance(expr, TypeList):
		return ["list", [encode_type(i) for i in expr.items]]
	if isinstance(expr, AnyType):
		return ["any"]
	if isinstance(expr, OpaqueType):
		return ["opaque", expr.text]
	if isinstance(expr, FunType):
		return ["fun", [encode_type(p) for p in expr.params], encode_type(expr.returns)]
	raise TypeError(f"not a type expression: {expr!r}")


def _decode_list(obj: Any, what: str) -> tuple[TypeExpr, ...]:
	if not isinstance(obj, list):
		raise ValueError(f"{what} must be a list")
	return tuple(decode_type(item) for item in obj)


def decode_type(obj: Any) -> TypeExpr:
	"""
	Decode the tagged list form back into a tree.

	Raises `ValueError` on unknown tags or malformed shapes; callers decide
	whether that is fatal (the chunk decoders treat it as "no specs").
	"""
	if not isinstance(obj, list) or not obj or not isinstance(obj[0], str):
		raise ValueError(f"malformed type term: {obj!r}")
	tag = obj[0]
	if tag == "named":
		if len(obj) != 3 or not isinstance(obj[1], str) or not obj[1]:
			raise ValueError("named type requires a non-empty name and an argument list")
		return NamedType(name=obj[1], args=_decode_list(obj[2], "named type arguments"))
	if tag == "union":
		if len(obj) != 2:
			raise ValueError("union type requires a member list")
		members = _decode_list(obj[1], "union members")
		if len(members) < 2:
			raise ValueError("union type requires at least two members")
		return UnionType(members=members)
	if tag == "lit":
		if len(obj) != 2 or (obj[1] is not None and not isinstance(obj[1], (str, int, bool))):
			raise ValueError("literal value must be str, int, bool or null")
		return LiteralValue(value=obj[1])
	if tag == "list":
		if len(obj) != 2:
			raise ValueError("type list requires an item list")
		return TypeList(items=_decode_list(obj[1], "type list items"))
	if tag == "any":
		if len(obj) != 1:
			raise ValueError("any type takes no payload")
		return AnyType()
	if tag == "opaque":
		if len(obj) != 2 or not isinstance(obj[1], str):
			raise ValueError("opaque type requires source text")
		return OpaqueType(text=obj[1])
	if tag == "fun":
		if len(obj) != 3:
			raise ValueError("fun type requires params and a return type")
		return FunType(params=_decode_list(obj[1], "fun params"), returns=decode_type(obj[2]))
	raise ValueError(f"unknown type term tag {tag!r}")


def render_type(expr: TypeExpr) -> str:
	"""Render Python annotation text for `expr`."""
	if isinstance(expr, NamedType):
		if not expr.args:
			return expr.name
		return f"{expr.name}[{', '.join(render_type(a) for a in expr.args)}]"
	if isinstance(expr, UnionType):
		return " | ".join(render_type(m) for m in expr.members)
	if isinstance(expr, LiteralValue):
		return repr(expr.value)
	if isinstance(expr, TypeList):
		return f"[{', '.join(render_type(i) for i in expr.items)}]"
	if isinstance(expr, AnyType):
		return "Any"
	if isinstance(expr, OpaqueType):
		return expr.text
	if isinstance(expr, FunType):
		params = ", ".join(render_type(p) for p in expr.params)
		return f"Callable[[{params}], {render_type(expr.returns)}]"
	raise TypeError(f"not a type expression: {expr!r}")


@dataclass(frozen=True)
class SpecClause:
	"""
	One signature clause bound to a function-name token.

	`render()` gives `name(int, int) -> int`. `renamed` and `realigned` are
	pure rewrites that return new clauses.
	"""

	name: str
	fun: FunType

	@property
	def arity(self) -> int:
		return self.fun.arity

	def renamed(self, name: str) -> "SpecClause":
		return replace(self, name=name)

	def realigned(self, order: list[int]) -> "SpecClause":
		"""
		Reorder parameter types: new param `i` takes old param `order[i]`.
		"""
		if sorted(order) != list(range(self.arity)):
			raise ValueError(f"order {order!r} is not a permutation of {self.arity} parameters")
		params = tuple(self.fun.params[i] for i in order)
		return replace(self, fun=replace(self.fun, params=params))

	def render(self) -> str:
		params = ", ".join(render_type(p) for p in self.fun.params)
		return f"{self.name}({params}) -> {render_type(self.fun.returns)}"


__all__ = [
	"AnyType",
	"FunType",
	"LiteralValue",
	"NamedType",
	"OpaqueType",
	"SpecClause",
	"TypeExpr",
	"TypeList",
	"UnionType",
	"decode_type",
	"encode_type",
	"render_type",
]
