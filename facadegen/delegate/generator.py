# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Delegate generation.

Given call patterns and delegation options, produce one `GeneratedDefinition`
per pattern. Each definition forwards to a function on the target module and
carries that function's documentation and signature clauses as if they had
been declared on the facade.

Pinned semantics:
- the pattern's name is the public name; `as` names the function on the
  target (defaults to the public name),
- the public parameter list is never rotated; only the forwarding call is
  (`append_first` moves the first argument to the end),
- doc/spec lookup uses the target name and the call arity,
- clauses are renamed to the public name and realigned to the public
  parameter order.

A request is all-or-nothing: options are validated and every pattern is
parsed before the target module is loaded, and any fatal error propagates
without returning partial output.
"""

from __future__ import annotations

import keyword
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from facadegen.artifacts.loader import ArtifactLoader, is_module_id
from facadegen.errors import ConfigurationError
from facadegen.metadata.lookup import MISSING_DOCS, ModuleMetadata, SpecMode, find_doc_record
from facadegen.metadata.types import SpecClause

from .parser import CallPattern, DelegationManifest, parse_call_pattern

logger = logging.getLogger(__name__)

_OPTION_KEYS = frozenset({"to", "as", "append_first"})


@dataclass(frozen=True)
class DelegationOptions:
	to: str
	as_: str | None = None
	append_first: bool = False

	@classmethod
	def from_mapping(cls, options: Mapping[str, Any]) -> "DelegationOptions":
		"""
		Validate raw options (`to`, `as`, `append_first`).

		Raises `ConfigurationError` before any lookup work happens.
		"""
		if not isinstance(options, Mapping):
			raise ConfigurationError(message=f"delegation options must be a mapping, got {type(options).__name__}")
		unknown = sorted(set(options) - _OPTION_KEYS)
		if unknown:
			raise ConfigurationError(message=f"unknown delegation option(s): {', '.join(map(str, unknown))}")
		target = options.get("to")
		if target is None:
			raise ConfigurationError(message="expected `to` to be given as a delegation option")
		if not is_module_id(target):
			raise ConfigurationError(message=f"`to` must be a dotted module name, got {target!r}")
		rename = options.get("as")
		if rename is not None and (not isinstance(rename, str) or not rename.isidentifier() or keyword.iskeyword(rename)):
			raise ConfigurationError(message=f"`as` must be a function name, got {rename!r}")
		append_first = options.get("append_first", False)
		if not isinstance(append_first, bool):
			raise ConfigurationError(message=f"`append_first` must be a bool, got {append_first!r}")
		return cls(to=target, as_=rename, append_first=append_first)


@dataclass(frozen=True)
class GeneratedDefinition:
	public_name: str
	params: tuple[str, ...]
	target_module: str
	target_name: str
	call_args: tuple[str, ...]
	doc: str
	specs: tuple[SpecClause, ...] = ()
	kind: str = "def"

	@property
	def arity(self) -> int:
		return len(self.params)

	def call_expression(self, module_ref: str | None = None) -> str:
		ref = self.target_module if module_ref is None else module_ref
		return f"{ref}.{self.target_name}({', '.join(self.call_args)})"


def rotate_args(params: tuple[str, ...], append_first: bool) -> tuple[str, ...]:
	"""Move the first argument to the end when `append_first` is set."""
	if append_first and params:
		return params[1:] + params[:1]
	return params


def _align_clause(clause: SpecClause, public_name: str, rotated: bool) -> SpecClause:
	out = clause.renamed(public_name)
	if rotated:
		# call_args = params[1:] + params[:1], so public param 0 is the last call arg.
		n = clause.arity
		out = out.realigned([n - 1] + list(range(n - 1)))
	return out


def _coerce_patterns(patterns: Iterable[str | CallPattern] | str | CallPattern) -> list[CallPattern]:
	if isinstance(patterns, (str, CallPattern)):
		patterns = [patterns]
	return [p if isinstance(p, CallPattern) else parse_call_pattern(p) for p in patterns]


def build_definition(
	metadata: ModuleMetadata,
	pattern: CallPattern,
	options: DelegationOptions,
	spec_mode: SpecMode = SpecMode.SPEC,
) -> GeneratedDefinition:
	actual_args = rotate_args(pattern.params, options.append_first)
	rotated = actual_args != pattern.params
	target_name = options.as_ or pattern.name
	arity = len(actual_args)
	record = find_doc_record(metadata.docs, target_name, arity)
	doc = record.doc if record is not None and isinstance(record.doc, str) else None
	# kind comes from any matching record, suppressed or not.
	kind = next((r.kind for r in metadata.docs if r.name == target_name and r.arity == arity), "def")
	clauses = tuple(_align_clause(c, pattern.name, rotated) for c in metadata.specs_for(target_name, arity, spec_mode))
	if doc is None:
		logger.debug("no docs for %s.%s/%d", metadata.module_id, target_name, arity)
	return GeneratedDefinition(
		public_name=pattern.name,
		params=pattern.params,
		target_module=metadata.module_id,
		target_name=target_name,
		call_args=actual_args,
		doc=MISSING_DOCS if doc is None else doc,
		specs=clauses,
		kind=kind,
	)


def generate_delegates(
	patterns: Iterable[str | CallPattern] | str | CallPattern,
	options: Mapping[str, Any] | DelegationOptions,
	*,
	loader: ArtifactLoader,
	spec_mode: SpecMode = SpecMode.SPEC,
) -> list[GeneratedDefinition]:
	"""
	Generate forwarding definitions for `patterns`.

	Raises `ConfigurationError`, `InvalidCallSyntax` or `ModuleUnavailable`;
	missing docs/specs never raise.
	"""
	opts = options if isinstance(options, DelegationOptions) else DelegationOptions.from_mapping(options)
	parsed = _coerce_patterns(patterns)
	artifact = loader.load(opts.to)
	metadata = ModuleMetadata.from_artifact(artifact)
	return [build_definition(metadata, p, opts, spec_mode) for p in parsed]


def generate_from_manifest(
	manifest: DelegationManifest,
	*,
	loader: ArtifactLoader,
	spec_mode: SpecMode = SpecMode.SPEC,
) -> list[GeneratedDefinition]:
	"""Run every request of a manifest; any failure aborts the whole manifest."""
	out: list[GeneratedDefinition] = []
	for req in manifest.requests:
		try:
			out.extend(generate_delegates(req.patterns, req.options, loader=loader, spec_mode=spec_mode))
		except ConfigurationError as err:
			if err.path is not None or manifest.path is None:
				raise
			raise ConfigurationError(message=err.message, path=manifest.path, line=req.line) from err
	return out


__all__ = [
	"DelegationOptions",
	"GeneratedDefinition",
	"build_definition",
	"generate_delegates",
	"generate_from_manifest",
	"rotate_args",
]
