# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Decoders for the `Meta`, `Docs` and `Spec` chunks.

Documentation and type signatures are best-effort metadata: a missing chunk
and a malformed chunk both decode to an empty result, and the problem is only
logged. Nothing in here may abort delegate generation.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, TypeVar

from .chunks import CHUNK_DOCS, CHUNK_META, CHUNK_SPEC, chunk_decoder
from .types import FunType, decode_type

logger = logging.getLogger(__name__)

DOC_KINDS = ("def", "async def")
ATTRIBUTE_KINDS = ("spec", "callback")

_T = TypeVar("_T")


class DocState(Enum):
	SUPPRESSED = "suppressed"


# Marker for functions that are deliberately undocumented (`@nodoc`).
SUPPRESSED = DocState.SUPPRESSED


@dataclass(frozen=True)
class DocRecord:
	"""
	One function documentation entry.

	`doc` is the doc text, `None` when the function has no docstring, or
	`SUPPRESSED` when it was deliberately left undocumented.
	"""

	name: str
	arity: int
	kind: str
	arg_names: tuple[str, ...]
	doc: str | None | DocState

	@property
	def suppressed(self) -> bool:
		return self.doc is SUPPRESSED


@dataclass(frozen=True)
class SpecRecord:
	"""A `spec` or `callback` attribute with all of its clauses (overloads)."""

	kind: str
	name: str
	arity: int
	clauses: tuple[FunType, ...]


def _load_json(chunk: bytes, fmt: str) -> dict[str, Any]:
	try:
		obj = json.loads(chunk.decode("utf-8"))
	except (UnicodeDecodeError, json.JSONDecodeError) as err:
		raise ValueError(f"chunk is not valid JSON: {err}") from err
	if not isinstance(obj, dict):
		raise ValueError("chunk must be a JSON object")
	if obj.get("format") != fmt:
		raise ValueError(f"unexpected chunk format {obj.get('format')!r} (want {fmt!r})")
	if obj.get("version") != 0:
		raise ValueError(f"unsupported chunk version {obj.get('version')!r}")
	return obj


def _is_arity(value: Any) -> bool:
	return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _best_effort(chunk_id: str, default: Callable[[], _T], fn: Callable[[bytes], _T], chunk: bytes | None) -> _T:
	if chunk is None:
		return default()
	try:
		return fn(chunk)
	except (ValueError, RecursionError) as err:
		logger.warning("ignoring malformed %s chunk: %s", chunk_id, err)
		return default()


def _decode_doc_record(raw: Any) -> DocRecord:
	if not isinstance(raw, list) or len(raw) != 5:
		raise ValueError(f"doc record must be a 5-element list, got {raw!r}")
	name, arity, kind, args, doc = raw
	if not isinstance(name, str) or not name:
		raise ValueError("doc record name must be a non-empty string")
	if not _is_arity(arity):
		raise ValueError(f"doc record {name!r} has invalid arity {arity!r}")
	if kind not in DOC_KINDS:
		raise ValueError(f"doc record {name!r} has unknown kind {kind!r}")
	if not isinstance(args, list) or not all(isinstance(a, str) for a in args) or len(args) != arity:
		raise ValueError(f"doc record {name!r} argument names do not match arity {arity}")
	if doc is False:
		doc_value: str | None | DocState = SUPPRESSED
	elif doc is None or isinstance(doc, str):
		doc_value = doc
	else:
		raise ValueError(f"doc record {name!r} has invalid doc field")
	return DocRecord(name=name, arity=arity, kind=kind, arg_names=tuple(args), doc=doc_value)


def _docs_from_bytes(chunk: bytes) -> list[DocRecord]:
	obj = _load_json(chunk, "facade-docs")
	records = obj.get("docs")
	if not isinstance(records, list):
		raise ValueError("docs chunk missing 'docs' list")
	return [_decode_doc_record(r) for r in records]


def _decode_spec_record(raw: Any) -> SpecRecord:
	if not isinstance(raw, list) or len(raw) != 4:
		raise ValueError(f"attribute record must be a 4-element list, got {raw!r}")
	kind, name, arity, clauses = raw
	if kind not in ATTRIBUTE_KINDS:
		raise ValueError(f"unknown attribute kind {kind!r}")
	if not isinstance(name, str) or not name:
		raise ValueError("attribute name must be a non-empty string")
	if not _is_arity(arity):
		raise ValueError(f"attribute {name!r} has invalid arity {arity!r}")
	if not isinstance(clauses, list):
		raise ValueError(f"attribute {name!r} clauses must be a list")
	funs: list[FunType] = []
	for term in clauses:
		fun = decode_type(term)
		if not isinstance(fun, FunType):
			raise ValueError(f"attribute {name!r} clause is not a fun term")
		if fun.arity != arity:
			raise ValueError(f"attribute {name!r} clause arity {fun.arity} != {arity}")
		funs.append(fun)
	return SpecRecord(kind=kind, name=name, arity=arity, clauses=tuple(funs))


def _specs_from_bytes(chunk: bytes) -> list[SpecRecord]:
	obj = _load_json(chunk, "facade-spec")
	attributes = obj.get("attributes")
	if not isinstance(attributes, list):
		raise ValueError("spec chunk missing 'attributes' list")
	return [_decode_spec_record(r) for r in attributes]


def _moduledoc_from_bytes(chunk: bytes) -> str | None:
	doc = _load_json(chunk, "facade-docs").get("moduledoc")
	if doc is not None and not isinstance(doc, str):
		raise ValueError("moduledoc must be a string or null")
	return doc


def _meta_from_bytes(chunk: bytes) -> dict[str, Any]:
	obj = _load_json(chunk, "facade-meta")
	if not isinstance(obj.get("module_id"), str) or not isinstance(obj.get("source_sha256"), str):
		raise ValueError("meta chunk requires module_id and source_sha256")
	return obj


@chunk_decoder(CHUNK_DOCS)
def decode_docs(chunk: bytes | None) -> list[DocRecord]:
	return _best_effort(CHUNK_DOCS, list, _docs_from_bytes, chunk)


@chunk_decoder(CHUNK_SPEC)
def decode_specs(chunk: bytes | None) -> list[SpecRecord]:
	return _best_effort(CHUNK_SPEC, list, _specs_from_bytes, chunk)


@chunk_decoder(CHUNK_META)
def decode_meta(chunk: bytes | None) -> dict[str, Any]:
	return _best_effort(CHUNK_META, dict, _meta_from_bytes, chunk)


def decode_module_doc(chunk: bytes | None) -> str | None:
	"""Return the module docstring stored in a `Docs` chunk, if any."""
	return _best_effort(CHUNK_DOCS, lambda: None, _moduledoc_from_bytes, chunk)


__all__ = [
	"DocRecord",
	"DocState",
	"SUPPRESSED",
	"SpecRecord",
	"decode_docs",
	"decode_meta",
	"decode_module_doc",
	"decode_specs",
]
