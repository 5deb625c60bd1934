# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Compiled artifact container (v0).

A tiny, deterministic tagged-section container. An artifact is a header, a
table of contents and the chunk payloads, in that order:

- chunks are addressed by a 4-character ASCII id (`Meta`, `Docs`, `Spec`, ...),
- each TOC entry carries the sha256 of its payload,
- the reader verifies magic/version/sizes/hashes before trusting any byte.

The container does not know what a chunk means. Interpretation is the job of
the chunk decoders in `facadegen.metadata`.
"""

from __future__ import annotations

import hashlib
import json
import struct
from dataclasses import dataclass, field
from typing import Any, Mapping

from facadegen.errors import ArtifactFormatError

MAGIC = b"FCDART\0\0"
VERSION = 0
CHUNK_ID_LEN = 4

# Header layout:
# magic(8), version(u16), flags(u16), chunk_count(u32), toc_sha256(32)
_HEADER_STRUCT = struct.Struct("<8sHHI32s")
HEADER_SIZE_V0 = _HEADER_STRUCT.size

# TOC entry layout:
# chunk_id(4), flags(u32), offset(u64), length(u64), payload_sha256(32)
_TOC_ENTRY_STRUCT = struct.Struct("<4sIQQ32s")
TOC_ENTRY_SIZE_V0 = _TOC_ENTRY_STRUCT.size


def sha256_bytes(data: bytes) -> bytes:
	"""Return sha256 digest bytes for `data`."""
	return hashlib.sha256(data).digest()


def sha256_hex(data: bytes) -> str:
	"""Return sha256 hex digest for `data`."""
	return hashlib.sha256(data).hexdigest()


def canonical_json_bytes(obj: Any) -> bytes:
	"""
	Render JSON deterministically.

	Rules:
	- UTF-8
	- no insignificant whitespace
	- stable key ordering
	"""
	return json.dumps(obj, sort_keys=True, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def _check_chunk_id(chunk_id: str) -> bytes:
	try:
		raw = chunk_id.encode("ascii")
	except UnicodeEncodeError as err:
		raise ArtifactFormatError(f"chunk id must be ASCII: {chunk_id!r}") from err
	if len(raw) != CHUNK_ID_LEN:
		raise ArtifactFormatError(f"chunk id must be exactly {CHUNK_ID_LEN} characters: {chunk_id!r}")
	return raw


@dataclass(frozen=True)
class ChunkSpan:
	"""Byte region of one chunk inside the artifact."""

	offset: int
	length: int
	sha256: str

	@property
	def end(self) -> int:
		return self.offset + self.length


@dataclass(frozen=True)
class CompiledArtifact:
	"""
	A verified, immutable compiled artifact.

	`toc` maps chunk id -> span inside `data`. Artifacts are shared read-only
	between all consumers (see `ArtifactCache`).
	"""

	module_id: str
	data: bytes = field(repr=False)
	toc: Mapping[str, ChunkSpan]

	@classmethod
	def from_bytes(cls, module_id: str, data: bytes) -> "CompiledArtifact":
		"""Parse and verify container bytes (raises `ArtifactFormatError`)."""
		return cls(module_id=module_id, data=bytes(data), toc=read_toc(data))

	@property
	def sha256(self) -> str:
		return sha256_hex(self.data)

	def chunk_ids(self) -> list[str]:
		return sorted(self.toc)


def write_artifact(chunks: Mapping[str, bytes]) -> bytes:
	"""
	Serialize `chunks` (chunk id -> payload) into container bytes.

	Chunks are laid out in ascending chunk-id order so identical inputs always
	produce identical bytes.
	"""
	ids = sorted(chunks)
	toc_raw: list[bytes] = []
	cur = HEADER_SIZE_V0 + len(ids) * TOC_ENTRY_SIZE_V0
	for chunk_id in ids:
		raw_id = _check_chunk_id(chunk_id)
		payload = bytes(chunks[chunk_id])
		toc_raw.append(_TOC_ENTRY_STRUCT.pack(raw_id, 0, cur, len(payload), sha256_bytes(payload)))
		cur += len(payload)
	toc_bytes = b"".join(toc_raw)
	header = _HEADER_STRUCT.pack(MAGIC, VERSION, 0, len(ids), sha256_bytes(toc_bytes))
	return header + toc_bytes + b"".join(bytes(chunks[c]) for c in ids)


def read_toc(data: bytes) -> dict[str, ChunkSpan]:
	"""
	Read and verify the table of contents of an artifact.

	Verification steps:
	- header magic/version/flags
	- toc sha256 matches header
	- chunk ids are unique
	- chunk regions are in-range and non-overlapping
	- each payload sha256 matches its TOC entry
	"""
	if len(data) < HEADER_SIZE_V0:
		raise ArtifactFormatError("unexpected EOF while reading artifact header")
	magic, version, flags, count, toc_sha = _HEADER_STRUCT.unpack_from(data, 0)
	if magic != MAGIC:
		raise ArtifactFormatError("invalid artifact magic")
	if version != VERSION:
		raise ArtifactFormatError(f"unsupported artifact version {version}")
	if flags != 0:
		raise ArtifactFormatError("unsupported artifact flags")

	toc_end = HEADER_SIZE_V0 + count * TOC_ENTRY_SIZE_V0
	if toc_end > len(data):
		raise ArtifactFormatError("unexpected EOF while reading artifact toc")
	toc_bytes = data[HEADER_SIZE_V0:toc_end]
	if sha256_bytes(toc_bytes) != toc_sha:
		raise ArtifactFormatError("toc sha256 mismatch")

	spans: dict[str, ChunkSpan] = {}
	for i in range(count):
		raw_id, _eflags, offset, length, payload_sha = _TOC_ENTRY_STRUCT.unpack_from(toc_bytes, i * TOC_ENTRY_SIZE_V0)
		try:
			chunk_id = raw_id.decode("ascii")
		except UnicodeDecodeError as err:
			raise ArtifactFormatError("chunk id is not ASCII") from err
		if chunk_id in spans:
			raise ArtifactFormatError(f"duplicate chunk id in toc: {chunk_id}")
		spans[chunk_id] = ChunkSpan(offset=int(offset), length=int(length), sha256=payload_sha.hex())

	prev_end = toc_end
	for chunk_id, span in sorted(spans.items(), key=lambda kv: kv[1].offset):
		if span.offset < prev_end:
			raise ArtifactFormatError("chunk regions overlap or point into header/toc")
		if span.end > len(data):
			raise ArtifactFormatError(f"chunk {chunk_id} out of range")
		if sha256_hex(data[span.offset : span.end]) != span.sha256:
			raise ArtifactFormatError(f"chunk sha256 mismatch for {chunk_id}")
		prev_end = span.end
	return spans


__all__ = [
	"ChunkSpan",
	"CompiledArtifact",
	"canonical_json_bytes",
	"read_toc",
	"sha256_hex",
	"write_artifact",
]
