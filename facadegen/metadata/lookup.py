# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Resolve documentation and signature clauses for a `(name, arity)` key.

Matching rules (pinned):
- docs: the first record matching `(name, arity)` that is not suppressed;
  a matching record without a docstring resolves to `None`.
- specs: clauses of *all* matching records, in record order; `callback`
  records only participate in `SpecMode.SPEC_AND_CALLBACK`.
Absence is never an error: `None` for docs, `[]` for specs.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Sequence

from facadegen.artifacts.container import CompiledArtifact

from .chunks import CHUNK_DOCS, CHUNK_SPEC, decode_chunk, extract_chunk
from .decoder import DocRecord, SpecRecord, decode_module_doc
from .types import SpecClause

if TYPE_CHECKING:
	from facadegen.artifacts.loader import ArtifactLoader

MISSING_DOCS = "No docs available for this function."


class SpecMode(Enum):
	SPEC = "spec"
	SPEC_AND_CALLBACK = "spec+callback"

	@property
	def kinds(self) -> frozenset[str]:
		if self is SpecMode.SPEC:
			return frozenset({"spec"})
		return frozenset({"spec", "callback"})


def find_doc_record(records: Sequence[DocRecord], name: str, arity: int) -> DocRecord | None:
	for rec in records:
		if rec.name == name and rec.arity == arity and not rec.suppressed:
			return rec
	return None


def find_doc(records: Sequence[DocRecord], name: str, arity: int) -> str | None:
	rec = find_doc_record(records, name, arity)
	if rec is None or not isinstance(rec.doc, str):
		return None
	return rec.doc


def find_specs(
	records: Sequence[SpecRecord],
	name: str,
	arity: int,
	mode: SpecMode = SpecMode.SPEC,
) -> list[SpecClause]:
	kinds = mode.kinds
	out: list[SpecClause] = []
	for rec in records:
		if rec.name == name and rec.arity == arity and rec.kind in kinds:
			out.extend(SpecClause(name=rec.name, fun=fun) for fun in rec.clauses)
	return out


@dataclass(frozen=True)
class ModuleMetadata:
	"""Decoded doc/spec tables of one artifact."""

	module_id: str
	moduledoc: str | None
	docs: tuple[DocRecord, ...]
	specs: tuple[SpecRecord, ...]

	@classmethod
	def from_artifact(cls, artifact: CompiledArtifact) -> "ModuleMetadata":
		return cls(
			module_id=artifact.module_id,
			moduledoc=decode_module_doc(extract_chunk(artifact, CHUNK_DOCS)),
			docs=tuple(decode_chunk(artifact, CHUNK_DOCS)),
			specs=tuple(decode_chunk(artifact, CHUNK_SPEC)),
		)

	def doc_for(self, name: str, arity: int) -> str | None:
		return find_doc(self.docs, name, arity)

	def specs_for(self, name: str, arity: int, mode: SpecMode = SpecMode.SPEC) -> list[SpecClause]:
		return find_specs(self.specs, name, arity, mode)


def _artifact(loader: "ArtifactLoader | None", module: str | CompiledArtifact) -> CompiledArtifact:
	if isinstance(module, CompiledArtifact):
		return module
	if loader is None:
		raise TypeError("a loader is required to resolve a module by name")
	return loader.load(module)


def get_function_docs(
	loader: "ArtifactLoader | None",
	module: str | CompiledArtifact,
	name: str,
	arity: int,
) -> str:
	"""
	Doc text for `module.name/arity`, or `MISSING_DOCS`.

	`module` may be a module name (loaded through `loader`) or an artifact.
	"""
	doc = ModuleMetadata.from_artifact(_artifact(loader, module)).doc_for(name, arity)
	return MISSING_DOCS if doc is None else doc


def get_function_specs(
	loader: "ArtifactLoader | None",
	module: str | CompiledArtifact,
	name: str,
	arity: int,
	mode: SpecMode = SpecMode.SPEC,
) -> list[SpecClause]:
	return ModuleMetadata.from_artifact(_artifact(loader, module)).specs_for(name, arity, mode)


def get_attributes(artifact: CompiledArtifact, kind: str) -> list[SpecRecord]:
	"""All attribute records of `kind` (`"spec"` or `"callback"`)."""
	return [rec for rec in decode_chunk(artifact, CHUNK_SPEC) if rec.kind == kind]


__all__ = [
	"MISSING_DOCS",
	"ModuleMetadata",
	"SpecMode",
	"find_doc",
	"find_doc_record",
	"find_specs",
	"get_attributes",
	"get_function_docs",
	"get_function_specs",
]
