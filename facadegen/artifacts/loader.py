# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Artifact loading: cache -> already compiled -> compile on demand.

`ArtifactLoader` composes two host primitives (`CompilationHost`):
- `get_already_compiled(module_id)` returns a previously built artifact or
  `None`,
- `compile_and_load(module_id)` compiles the module source and returns the
  fresh artifact, raising `ModuleUnavailable` when that is impossible.

`SourceHost` is the default host. It locates module sources under explicit
module roots (falling back to the import system's finder) and keeps
artifacts in an optional on-disk build directory. Compilation failures are
reported once; there is no retry.
"""

from __future__ import annotations

import importlib.util
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol, Sequence

from facadegen.compiler.source import compile_source
from facadegen.errors import ArtifactFormatError, ModuleUnavailable
from facadegen.metadata.chunks import CHUNK_META, extract_chunk
from facadegen.metadata.decoder import decode_meta

from .cache import ArtifactCache
from .container import CompiledArtifact, sha256_hex

logger = logging.getLogger(__name__)

ARTIFACT_SUFFIX = ".fca"


def is_module_id(module_id: object) -> bool:
	if not isinstance(module_id, str) or not module_id:
		return False
	return all(part.isidentifier() for part in module_id.split("."))


class CompilationHost(Protocol):
	def get_already_compiled(self, module_id: str) -> CompiledArtifact | None: ...

	def compile_and_load(self, module_id: str) -> CompiledArtifact: ...


class SourceHost:
	"""
	Host environment backed by Python source files.

	Module `a.b` resolves to `<root>/a/b.py` or `<root>/a/b/__init__.py` for
	the first root that has it. When no root matches and `use_import_system`
	is set, `importlib.util.find_spec` is consulted (source origins only).
	"""

	def __init__(
		self,
		module_paths: Sequence[Path] = (),
		build_dir: Path | None = None,
		*,
		use_import_system: bool = True,
	) -> None:
		self.module_paths = [Path(p) for p in module_paths]
		self.build_dir = Path(build_dir) if build_dir is not None else None
		self.use_import_system = use_import_system

	def locate_source(self, module_id: str) -> Path | None:
		parts = module_id.split(".")
		for root in self.module_paths:
			for candidate in (root.joinpath(*parts).with_suffix(".py"), root.joinpath(*parts, "__init__.py")):
				if candidate.is_file():
					return candidate
		if not self.use_import_system:
			return None
		try:
			spec = importlib.util.find_spec(module_id)
		except (ImportError, ValueError) as err:
			logger.debug("import system cannot locate %s: %s", module_id, err)
			return None
		if spec is None or not spec.origin or not spec.origin.endswith(".py"):
			return None
		return Path(spec.origin)

	def artifact_path(self, module_id: str) -> Path | None:
		if self.build_dir is None:
			return None
		return self.build_dir / f"{module_id}{ARTIFACT_SUFFIX}"

	def get_already_compiled(self, module_id: str) -> CompiledArtifact | None:
		path = self.artifact_path(module_id)
		if path is None or not path.is_file():
			return None
		try:
			artifact = CompiledArtifact.from_bytes(module_id, path.read_bytes())
		except (OSError, ArtifactFormatError) as err:
			logger.warning("ignoring unreadable artifact %s: %s", path, err)
			return None
		meta = decode_meta(extract_chunk(artifact, CHUNK_META))
		if meta.get("module_id") != module_id:
			logger.warning("ignoring artifact %s: built for module %r", path, meta.get("module_id"))
			return None
		source = self.locate_source(module_id)
		if source is not None:
			try:
				current = sha256_hex(source.read_bytes())
			except OSError:
				current = None
			if current != meta.get("source_sha256"):
				logger.warning("artifact %s is stale; recompiling", path)
				return None
		return artifact

	def compile_and_load(self, module_id: str) -> CompiledArtifact:
		source = self.locate_source(module_id)
		if source is None:
			raise ModuleUnavailable(message="module source not found", module_id=module_id)
		try:
			raw = source.read_bytes()
		except OSError as err:
			raise ModuleUnavailable(message=f"cannot read module source: {err}", module_id=module_id, path=str(source)) from err
		try:
			data = compile_source(module_id, raw, filename=str(source))
		except SyntaxError as err:
			raise ModuleUnavailable(
				message=f"module failed to compile: {err.msg}",
				module_id=module_id,
				path=str(source),
				line=err.lineno,
				column=err.offset,
			) from err
		path = self.artifact_path(module_id)
		if path is not None:
			_write_atomic(path, data)
			logger.info("wrote artifact %s", path)
		return CompiledArtifact.from_bytes(module_id, data)


def _write_atomic(path: Path, data: bytes) -> None:
	path.parent.mkdir(parents=True, exist_ok=True)
	fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=path.name, suffix=".tmp")
	try:
		with os.fdopen(fd, "wb") as f:
			f.write(data)
		os.replace(tmp_name, path)
	except BaseException:
		Path(tmp_name).unlink(missing_ok=True)
		raise


class ArtifactLoader:
	"""Resolve module ids to compiled artifacts through a shared cache."""

	def __init__(self, host: CompilationHost, cache: ArtifactCache | None = None) -> None:
		self.host = host
		self.cache = cache if cache is not None else ArtifactCache()

	def load(self, module_id: str) -> CompiledArtifact:
		if not is_module_id(module_id):
			raise ModuleUnavailable(message=f"invalid module identifier {module_id!r}", module_id=str(module_id))
		cached = self.cache.get(module_id)
		if cached is not None:
			logger.debug("artifact cache hit: %s", module_id)
			return cached
		logger.debug("artifact cache miss: %s", module_id)
		artifact = self.host.get_already_compiled(module_id)
		if artifact is None:
			artifact = self.host.compile_and_load(module_id)
		return self.cache.insert(artifact)


__all__ = [
	"ARTIFACT_SUFFIX",
	"ArtifactLoader",
	"CompilationHost",
	"SourceHost",
	"is_module_id",
]
