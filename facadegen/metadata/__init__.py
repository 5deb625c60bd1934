# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Metadata layer: chunk extraction, chunk decoders, type-expression trees and
the `(name, arity)` lookup rules used by delegate generation.
"""

from __future__ import annotations

from . import chunks, decoder, lookup, types

__all__ = [
	"chunks",
	"decoder",
	"lookup",
	"types",
]
