# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Process-scoped compiled artifact cache.

The cache is an explicit service handed to `ArtifactLoader` rather than a
module global. It is unbounded and never evicts.

Concurrency contract: two concurrent misses for the same module may both
compile, but `insert` keeps whichever artifact landed first and hands that
same object back to every caller.
"""

from __future__ import annotations

import threading
from typing import Iterator

from .container import CompiledArtifact


class ArtifactCache:
	def __init__(self) -> None:
		self._entries: dict[str, CompiledArtifact] = {}
		self._lock = threading.Lock()

	def get(self, module_id: str) -> CompiledArtifact | None:
		with self._lock:
			return self._entries.get(module_id)

	def insert(self, artifact: CompiledArtifact) -> CompiledArtifact:
		"""Insert `artifact` unless an entry exists; return the stored entry."""
		with self._lock:
			return self._entries.setdefault(artifact.module_id, artifact)

	def clear(self) -> None:
		with self._lock:
			self._entries.clear()

	def __contains__(self, module_id: object) -> bool:
		with self._lock:
			return module_id in self._entries

	def __len__(self) -> int:
		with self._lock:
			return len(self._entries)

	def __iter__(self) -> Iterator[str]:
		with self._lock:
			return iter(sorted(self._entries))


__all__ = ["ArtifactCache"]
