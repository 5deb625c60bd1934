# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Python source -> compiled artifact.

The compiler never imports or executes the module. It parses the source with
`ast` and records, for every top-level function:
- a doc record `[name, arity, kind, arg_names, doc]` in the `Docs` chunk,
- a `spec` attribute in the `Spec` chunk when the function is annotated
  (one clause per `typing.overload` variant),
and a `callback` attribute for each method of a `Protocol` class or abstract
method. Arity counts positional parameters only.

Doc field encoding (pinned):
- string: the cleaned docstring (may be empty),
- null: no docstring,
- false: deliberately undocumented (`@nodoc`).
"""

from __future__ import annotations

import ast
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

from facadegen.artifacts.container import canonical_json_bytes, sha256_hex, write_artifact
from facadegen.metadata.chunks import CHUNK_DOCS, CHUNK_META, CHUNK_SPEC
from facadegen.metadata.types import FunType, encode_type

from .annotations import annotation_to_type

logger = logging.getLogger(__name__)

COMPILER_NAME = "facadegen"
FORMAT_VERSION = 0

_FunctionNode = ast.FunctionDef | ast.AsyncFunctionDef


def _decorator_names(fn: _FunctionNode | ast.ClassDef) -> list[str]:
	out: list[str] = []
	for dec in fn.decorator_list:
		target = dec.func if isinstance(dec, ast.Call) else dec
		if isinstance(target, ast.Name):
			out.append(target.id)
		elif isinstance(target, ast.Attribute):
			out.append(target.attr)
	return out


def _positional(fn: _FunctionNode) -> list[ast.arg]:
	return list(fn.args.posonlyargs) + list(fn.args.args)


def _is_annotated(fn: _FunctionNode) -> bool:
	return fn.returns is not None or any(a.annotation is not None for a in _positional(fn))


def _fun_type(params: Iterable[ast.arg], returns: ast.expr | None) -> FunType:
	return FunType(
		params=tuple(annotation_to_type(a.annotation) for a in params),
		returns=annotation_to_type(returns),
	)


@dataclass
class _FunctionInfo:
	name: str
	impl: _FunctionNode | None = None
	overloads: list[_FunctionNode] = field(default_factory=list)


def _is_contract_class(cls: ast.ClassDef) -> bool:
	for base in cls.bases:
		node = base.value if isinstance(base, ast.Subscript) else base
		if isinstance(node, ast.Name) and node.id == "Protocol":
			return True
		if isinstance(node, ast.Attribute) and node.attr == "Protocol":
			return True
	return False


def _doc_record(fn: _FunctionNode) -> list[Any]:
	params = _positional(fn)
	doc: str | bool | None
	if "nodoc" in _decorator_names(fn):
		doc = False
	else:
		doc = ast.get_docstring(fn, clean=True)
	kind = "async def" if isinstance(fn, ast.AsyncFunctionDef) else "def"
	return [fn.name, len(params), kind, [a.arg for a in params], doc]


def _spec_attributes(info: _FunctionInfo) -> list[list[Any]]:
	if info.overloads:
		by_arity: dict[int, list[FunType]] = {}
		for fn in info.overloads:
			fun = _fun_type(_positional(fn), fn.returns)
			by_arity.setdefault(fun.arity, []).append(fun)
		return [
			["spec", info.name, arity, [encode_type(f) for f in funs]]
			for arity, funs in sorted(by_arity.items())
		]
	if info.impl is not None and _is_annotated(info.impl):
		fun = _fun_type(_positional(info.impl), info.impl.returns)
		return [["spec", info.name, fun.arity, [encode_type(fun)]]]
	return []


def _callback_attributes(cls: ast.ClassDef) -> list[list[Any]]:
	contract = _is_contract_class(cls)
	out: list[list[Any]] = []
	for stmt in cls.body:
		if not isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef)):
			continue
		decorators = _decorator_names(stmt)
		if not contract and "abstractmethod" not in decorators:
			continue
		params = _positional(stmt)
		if "staticmethod" not in decorators and params:
			params = params[1:]
		fun = _fun_type(params, stmt.returns)
		out.append(["callback", stmt.name, fun.arity, [encode_type(fun)]])
	return out


def collect_module(tree: ast.Module) -> tuple[str | None, list[list[Any]], list[list[Any]]]:
	"""Return `(moduledoc, doc_records, attributes)` for a parsed module."""
	functions: dict[str, _FunctionInfo] = {}
	callbacks: list[list[Any]] = []
	for stmt in tree.body:
		if isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef)):
			info = functions.setdefault(stmt.name, _FunctionInfo(name=stmt.name))
			if "overload" in _decorator_names(stmt):
				info.overloads.append(stmt)
			else:
				# Rebinding a name replaces the earlier definition, as at runtime.
				info.impl = stmt
		elif isinstance(stmt, ast.ClassDef):
			callbacks.extend(_callback_attributes(stmt))

	docs: list[list[Any]] = []
	attributes: list[list[Any]] = []
	for info in functions.values():
		if info.impl is not None:
			docs.append(_doc_record(info.impl))
		attributes.extend(_spec_attributes(info))
	attributes.extend(callbacks)
	return ast.get_docstring(tree, clean=True), docs, attributes


def compile_source(module_id: str, source: str | bytes, *, filename: str = "<unknown>") -> bytes:
	"""
	Compile module source into artifact bytes.

	Raises `SyntaxError` when the source does not parse; the host turns that
	into `ModuleUnavailable`.
	"""
	raw = source.encode("utf-8") if isinstance(source, str) else bytes(source)
	tree = ast.parse(raw, filename=filename)
	moduledoc, docs, attributes = collect_module(tree)
	logger.debug("compiled %s: %d doc record(s), %d attribute(s)", module_id, len(docs), len(attributes))
	chunks = {
		CHUNK_META: canonical_json_bytes(
			{
				"format": "facade-meta",
				"version": FORMAT_VERSION,
				"compiler": COMPILER_NAME,
				"module_id": module_id,
				"source_sha256": sha256_hex(raw),
			}
		),
		CHUNK_DOCS: canonical_json_bytes(
			{
				"format": "facade-docs",
				"version": FORMAT_VERSION,
				"moduledoc": moduledoc,
				"docs": docs,
			}
		),
		CHUNK_SPEC: canonical_json_bytes(
			{
				"format": "facade-spec",
				"version": FORMAT_VERSION,
				"attributes": attributes,
			}
		),
	}
	return write_artifact(chunks)


__all__ = [
	"COMPILER_NAME",
	"FORMAT_VERSION",
	"collect_module",
	"compile_source",
]
