# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Runtime configuration for facade generation.

Values come from the environment (`FacadeConfig.from_env`) and may be
overridden by CLI flags (`with_overrides`).

- `FACADEGEN_PATH`: module roots, `os.pathsep` separated
- `FACADEGEN_BUILD_DIR`: where compiled artifacts are persisted (optional)
- `FACADEGEN_INCLUDE_CALLBACKS`: `1`/`true`/`yes` to include callback clauses
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Sequence

from facadegen.artifacts.cache import ArtifactCache
from facadegen.artifacts.loader import ArtifactLoader, SourceHost
from facadegen.metadata.lookup import SpecMode

ENV_MODULE_PATH = "FACADEGEN_PATH"
ENV_BUILD_DIR = "FACADEGEN_BUILD_DIR"
ENV_INCLUDE_CALLBACKS = "FACADEGEN_INCLUDE_CALLBACKS"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class FacadeConfig:
	module_paths: tuple[Path, ...] = ()
	build_dir: Path | None = None
	include_callbacks: bool = False

	@classmethod
	def from_env(cls, environ: Mapping[str, str] | None = None) -> "FacadeConfig":
		env = os.environ if environ is None else environ
		raw_paths = env.get(ENV_MODULE_PATH) or ""
		paths = tuple(Path(p) for p in raw_paths.split(os.pathsep) if p)
		build_dir = env.get(ENV_BUILD_DIR) or None
		include = (env.get(ENV_INCLUDE_CALLBACKS) or "").strip().lower() in _TRUTHY
		return cls(
			module_paths=paths,
			build_dir=Path(build_dir) if build_dir else None,
			include_callbacks=include,
		)

	def with_overrides(
		self,
		*,
		module_paths: Sequence[Path] | None = None,
		build_dir: Path | None = None,
		include_callbacks: bool | None = None,
	) -> "FacadeConfig":
		"""
		Return a copy with CLI-provided values applied.

		Explicit module paths are searched before the environment's roots.
		"""
		cfg = self
		if module_paths:
			cfg = replace(cfg, module_paths=tuple(Path(p) for p in module_paths) + cfg.module_paths)
		if build_dir is not None:
			cfg = replace(cfg, build_dir=Path(build_dir))
		if include_callbacks is not None:
			cfg = replace(cfg, include_callbacks=bool(include_callbacks))
		return cfg

	@property
	def spec_mode(self) -> SpecMode:
		return SpecMode.SPEC_AND_CALLBACK if self.include_callbacks else SpecMode.SPEC

	def make_loader(self, cache: ArtifactCache | None = None) -> ArtifactLoader:
		host = SourceHost(module_paths=self.module_paths, build_dir=self.build_dir)
		return ArtifactLoader(host, cache=cache)


__all__ = [
	"ENV_BUILD_DIR",
	"ENV_INCLUDE_CALLBACKS",
	"ENV_MODULE_PATH",
	"FacadeConfig",
]
