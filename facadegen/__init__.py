# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
facadegen: build-time generation of delegating facade modules.

A facade re-exposes functions from other modules while preserving their
documentation and type signatures. Metadata is read from compiled artifacts
(see `facadegen.artifacts`) and carried onto generated forwarding functions
(see `facadegen.delegate`).
"""

from __future__ import annotations

from .markers import nodoc

__version__ = "0.1.0"

__all__ = [
	"__version__",
	"nodoc",
]
