# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Compiled artifact handling.

- `container`: the deterministic tagged-section byte format,
- `cache`: the process-scoped artifact cache service,
- `loader`: cache -> already compiled -> compile on demand.
"""

from __future__ import annotations

__all__ = [
	"cache",
	"container",
	"loader",
]
