# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Delegation: call-pattern/manifest parsing, definition generation and facade
source emission.
"""

from __future__ import annotations

from .emitter import render_module
from .generator import DelegationOptions, GeneratedDefinition, generate_delegates, generate_from_manifest
from .parser import CallPattern, parse_call_pattern, parse_manifest

__all__ = [
	"CallPattern",
	"DelegationOptions",
	"GeneratedDefinition",
	"generate_delegates",
	"generate_from_manifest",
	"parse_call_pattern",
	"parse_manifest",
	"render_module",
]
