# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Render generated definitions as Python facade module source.

Layout of the emitted module:
- generated-file header and optional module docstring,
- `from __future__ import annotations` (annotations are copied verbatim from
  the target and must not be evaluated in the facade),
- one aliased import per target module,
- one function per definition; several clauses become `typing.overload`
  stubs followed by an unannotated implementation.

Output is deterministic for identical definitions.
"""

from __future__ import annotations

from typing import Sequence

from facadegen.errors import DuplicateDefinition
from facadegen.metadata.types import AnyType, SpecClause, TypeExpr, render_type

from .generator import GeneratedDefinition

INDENT = "    "


def _alias_for(module_id: str, taken: set[str]) -> str:
	base = "_" + module_id.replace(".", "_")
	alias = base
	n = 1
	while alias in taken:
		n += 1
		alias = f"{base}_{n}"
	taken.add(alias)
	return alias


def module_aliases(definitions: Sequence[GeneratedDefinition]) -> dict[str, str]:
	"""Map each target module to a private import alias, in sorted order."""
	taken: set[str] = {d.public_name for d in definitions}
	for d in definitions:
		taken.update(d.params)
	return {mod: _alias_for(mod, taken) for mod in sorted({d.target_module for d in definitions})}


def docstring_literal(text: str, indent: str = "") -> str:
	"""
	Quote `text` as a triple-quoted docstring that `ast.get_docstring`
	reads back unchanged.
	"""
	body = text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
	if body.endswith('"'):
		body = body[:-1] + '\\"'
	lines = body.split("\n")
	if len(lines) > 1:
		lines = [lines[0]] + [f"{indent}{line}" if line else "" for line in lines[1:]]
		return '"""' + "\n".join(lines) + "\n" + indent + '"""'
	return '"""' + body + '"""'


def _annotated(name: str, type_expr: TypeExpr | None) -> str:
	if type_expr is None or isinstance(type_expr, AnyType):
		return name
	return f"{name}: {render_type(type_expr)}"


def _signature(defn: GeneratedDefinition, clause: SpecClause | None) -> str:
	params = []
	for i, param in enumerate(defn.params):
		params.append(_annotated(param, clause.fun.params[i] if clause is not None else None))
	returns = ""
	if clause is not None and not isinstance(clause.fun.returns, AnyType):
		returns = f" -> {render_type(clause.fun.returns)}"
	prefix = "async def" if defn.kind == "async def" else "def"
	return f"{prefix} {defn.public_name}({', '.join(params)}){returns}:"


def render_definition(defn: GeneratedDefinition, module_ref: str, indent: str = INDENT) -> str:
	lines: list[str] = []
	impl_clause: SpecClause | None = None
	if len(defn.specs) == 1:
		impl_clause = defn.specs[0]
	elif len(defn.specs) > 1:
		for clause in defn.specs:
			lines.append("@typing.overload")
			lines.append(f"{_signature(defn, clause)} ...")
	lines.append(_signature(defn, impl_clause))
	lines.append(indent + docstring_literal(defn.doc, indent))
	call = defn.call_expression(module_ref)
	lines.append(f"{indent}return await {call}" if defn.kind == "async def" else f"{indent}return {call}")
	return "\n".join(lines)


def render_module(
	definitions: Sequence[GeneratedDefinition],
	*,
	source: str | None = None,
	moduledoc: str | None = None,
	indent: str = INDENT,
) -> str:
	"""
	Render a complete facade module.

	Raises `DuplicateDefinition` when two definitions share a public name:
	Python cannot dispatch on arity, so the second would shadow the first.
	"""
	seen: dict[str, GeneratedDefinition] = {}
	for defn in definitions:
		prev = seen.get(defn.public_name)
		if prev is not None:
			raise DuplicateDefinition(
				message=(
					f"{defn.public_name}/{prev.arity} and {defn.public_name}/{defn.arity} "
					"would share one Python function name"
				),
				pattern=defn.public_name,
				path=source,
			)
		seen[defn.public_name] = defn

	aliases = module_aliases(definitions)
	header = ["# Generated by facadegen" + (f" from {source}" if source else "") + ". Do not edit."]
	if moduledoc is not None:
		header.append(docstring_literal(moduledoc))
	imports = ["from __future__ import annotations", ""]
	if any(len(d.specs) > 1 for d in definitions):
		imports.append("import typing")
	imports.extend(f"import {mod} as {alias}" for mod, alias in aliases.items())

	blocks = ["\n".join(header) + "\n\n" + "\n".join(imports).rstrip("\n")]
	blocks.extend(render_definition(d, aliases[d.target_module], indent) for d in definitions)
	return "\n\n\n".join(blocks) + "\n"


__all__ = [
	"docstring_literal",
	"module_aliases",
	"render_definition",
	"render_module",
]
