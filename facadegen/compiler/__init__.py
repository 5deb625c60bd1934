# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Source compiler: turns Python module source into a compiled artifact without
importing or executing it.
"""

from __future__ import annotations

__all__ = [
	"annotations",
	"source",
]
