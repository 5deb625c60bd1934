# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Chunk extraction and the per-kind decoder registry.

Extraction is a pure slice over an already verified artifact. A missing chunk
is not an error: it yields `None`, which every registered decoder treats the
same as an empty chunk.
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from facadegen.artifacts.container import CompiledArtifact

CHUNK_META = "Meta"
CHUNK_DOCS = "Docs"
CHUNK_SPEC = "Spec"

ChunkDecoder = Callable[[bytes | None], Any]
_D = TypeVar("_D", bound=ChunkDecoder)

_DECODERS: dict[str, ChunkDecoder] = {}


def chunk_decoder(chunk_id: str) -> Callable[[_D], _D]:
	"""Register the decorated function as the decoder for `chunk_id`."""

	def register(fn: _D) -> _D:
		if chunk_id in _DECODERS and _DECODERS[chunk_id] is not fn:
			raise ValueError(f"decoder for chunk {chunk_id!r} already registered")
		_DECODERS[chunk_id] = fn
		return fn

	return register


def registered_chunks() -> list[str]:
	return sorted(_DECODERS)


def extract_chunk(artifact: CompiledArtifact, chunk_id: str) -> bytes | None:
	span = artifact.toc.get(chunk_id)
	if span is None:
		return None
	return artifact.data[span.offset : span.end]


def list_chunks(artifact: CompiledArtifact) -> list[tuple[str, int]]:
	"""Return `(chunk_id, size)` pairs in chunk-id order."""
	return [(cid, artifact.toc[cid].length) for cid in artifact.chunk_ids()]


def decode_chunk(artifact: CompiledArtifact, chunk_id: str) -> Any:
	"""Extract `chunk_id` and run its registered decoder."""
	decoder = _DECODERS.get(chunk_id)
	if decoder is None:
		raise KeyError(f"no decoder registered for chunk {chunk_id!r}")
	return decoder(extract_chunk(artifact, chunk_id))


__all__ = [
	"CHUNK_DOCS",
	"CHUNK_META",
	"CHUNK_SPEC",
	"chunk_decoder",
	"decode_chunk",
	"extract_chunk",
	"list_chunks",
	"registered_chunks",
]
