# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Structured errors raised by facade generation.

Every fatal condition is a `FacadeError` subclass with a stable `reason_code`
so the CLI can render it either for humans or as JSON. Missing documentation
or type signatures are never errors; they are represented by placeholder
values further down the pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class FacadeError(Exception):
	"""Base error for facadegen tooling."""

	reason_code: str
	message: str
	module_id: str | None = None
	pattern: str | None = None
	path: str | None = None
	line: int | None = None
	column: int | None = None

	def __str__(self) -> str:
		return self.format_human()

	def to_dict(self) -> dict[str, Any]:
		return {
			"reason_code": self.reason_code,
			"message": self.message,
			"module_id": self.module_id,
			"pattern": self.pattern,
			"path": self.path,
			"line": self.line,
			"column": self.column,
		}

	def format_human(self) -> str:
		parts: list[str] = [f"[{self.reason_code}] {self.message}"]
		if self.module_id:
			parts.append(f"module={self.module_id}")
		if self.pattern:
			parts.append(f"pattern={self.pattern}")
		if self.path:
			loc = self.path
			if self.line is not None:
				loc = f"{loc}:{self.line}:{self.column if self.column is not None else '?'}"
			parts.append(f"at={loc}")
		return " ".join(parts)


@dataclass(frozen=True)
class ModuleUnavailable(FacadeError):
	"""The target module cannot be located or compiled."""

	reason_code: str = "module-unavailable"
	message: str = "module unavailable"


@dataclass(frozen=True)
class ConfigurationError(FacadeError):
	"""Delegation options are missing or malformed (e.g. no `to`)."""

	reason_code: str = "configuration"
	message: str = "invalid delegation options"


@dataclass(frozen=True)
class InvalidCallSyntax(FacadeError):
	"""A call pattern could not be decomposed into a name and parameter list."""

	reason_code: str = "invalid-call-syntax"
	message: str = "invalid call syntax"


@dataclass(frozen=True)
class ManifestSyntaxError(FacadeError):
	reason_code: str = "manifest-syntax"
	message: str = "invalid delegation manifest"


@dataclass(frozen=True)
class DuplicateDefinition(FacadeError):
	"""Two generated definitions share a public name (Python cannot overload by arity)."""

	reason_code: str = "duplicate-definition"
	message: str = "duplicate public definition"


class ArtifactFormatError(ValueError):
	"""Raised when artifact container bytes are malformed or fail integrity checks."""


__all__ = [
	"ArtifactFormatError",
	"ConfigurationError",
	"DuplicateDefinition",
	"FacadeError",
	"InvalidCallSyntax",
	"ManifestSyntaxError",
	"ModuleUnavailable",
]
