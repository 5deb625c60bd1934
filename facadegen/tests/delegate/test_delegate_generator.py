# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from facadegen.artifacts.container import CompiledArtifact, canonical_json_bytes, write_artifact
from facadegen.artifacts.loader import ArtifactLoader
from facadegen.delegate.generator import (
	DelegationOptions,
	GeneratedDefinition,
	generate_delegates,
	generate_from_manifest,
	rotate_args,
)
from facadegen.delegate.parser import CallPattern, parse_manifest
from facadegen.errors import ConfigurationError, InvalidCallSyntax, ModuleUnavailable
from facadegen.metadata.lookup import MISSING_DOCS, SpecMode


class _StaticHost:
	"""Serves fixed artifacts and records which modules were requested."""

	def __init__(self, artifacts: dict[str, bytes]) -> None:
		self.artifacts = artifacts
		self.requested: list[str] = []

	def get_already_compiled(self, module_id: str) -> CompiledArtifact | None:
		self.requested.append(module_id)
		data = self.artifacts.get(module_id)
		return None if data is None else CompiledArtifact.from_bytes(module_id, data)

	def compile_and_load(self, module_id: str) -> CompiledArtifact:
		raise ModuleUnavailable(message="module source not found", module_id=module_id)


def _single(defs: list[GeneratedDefinition]) -> GeneratedDefinition:
	assert len(defs) == 1
	return defs[0]


@pytest.mark.parametrize(
	"params",
	[(), ("a",), ("a", "b"), ("opts", "key", "value"), tuple(f"p{i}" for i in range(8))],
)
def test_rotation_rules(params: tuple[str, ...]) -> None:
	assert rotate_args(params, append_first=False) == params
	if params:
		assert rotate_args(params, append_first=True) == params[1:] + (params[0],)
	else:
		assert rotate_args(params, append_first=True) == ()


def test_call_order_matches_params_without_append_first(maps_module: str, loader: ArtifactLoader) -> None:
	defn = _single(generate_delegates("put(key, value, opts)", {"to": maps_module}, loader=loader))
	assert defn.call_args == defn.params == ("key", "value", "opts")
	assert defn.call_expression() == "pkg.maps.put(key, value, opts)"


def test_renamed_delegate_keeps_target_docs_and_specs(maps_module: str, loader: ArtifactLoader) -> None:
	defn = _single(generate_delegates(["g(a, b)"], {"to": maps_module, "as": "f"}, loader=loader))
	assert defn.public_name == "g"
	assert defn.params == ("a", "b")
	assert defn.target_name == "f"
	assert defn.call_expression() == "pkg.maps.f(a, b)"
	assert defn.doc == "computes f"
	assert [c.render() for c in defn.specs] == ["g(int, int) -> int"]


def test_append_first_rotates_call_and_realigns_specs(maps_module: str, loader: ArtifactLoader) -> None:
	defn = _single(
		generate_delegates("put(opts, key, value)", {"to": maps_module, "append_first": True}, loader=loader)
	)
	assert defn.public_name == "put"
	assert defn.params == ("opts", "key", "value")
	assert defn.call_expression() == "pkg.maps.put(key, value, opts)"
	assert defn.doc == "Store value under key."
	assert [c.render() for c in defn.specs] == ["put(dict[str, Any], str, int) -> dict[str, Any]"]


def test_missing_docs_use_placeholder(maps_module: str, loader: ArtifactLoader) -> None:
	bare, hidden, other_arity = generate_delegates(
		["bare(x)", "hidden(x)", "f(a)"],
		{"to": maps_module},
		loader=loader,
	)
	assert bare.doc == MISSING_DOCS and bare.specs == ()
	assert hidden.doc == MISSING_DOCS
	assert other_arity.doc == MISSING_DOCS and other_arity.specs == ()


def test_module_without_docs_chunk_still_generates() -> None:
	meta = canonical_json_bytes({"format": "facade-meta", "version": 0, "module_id": "bare.mod", "source_sha256": "0"})
	host = _StaticHost({"bare.mod": write_artifact({"Meta": meta})})
	defs = generate_delegates(["a(x)", "b(x, y)"], {"to": "bare.mod"}, loader=ArtifactLoader(host))
	assert [d.doc for d in defs] == [MISSING_DOCS, MISSING_DOCS]
	assert all(d.specs == () for d in defs)


@pytest.mark.parametrize("patterns", [[], ["f(a)"], ["f(a)", "g(a, b)", "h()"]])
def test_missing_to_always_fails(patterns: list[str]) -> None:
	host = _StaticHost({})
	with pytest.raises(ConfigurationError, match="expected `to`"):
		generate_delegates(patterns, {"append_first": True}, loader=ArtifactLoader(host))
	assert host.requested == []


@pytest.mark.parametrize(
	"options",
	[
		{"to": "pkg.maps", "bogus": 1},
		{"to": "pkg maps"},
		{"to": 3},
		{"to": "pkg.maps", "as": "not valid"},
		{"to": "pkg.maps", "as": "class"},
		{"to": "pkg.maps", "append_first": "yes"},
	],
)
def test_invalid_options_are_rejected(options: dict) -> None:
	with pytest.raises(ConfigurationError):
		DelegationOptions.from_mapping(options)


def test_bad_pattern_fails_before_loading() -> None:
	host = _StaticHost({})
	with pytest.raises(InvalidCallSyntax) as exc:
		generate_delegates(["f(a)", "g(1)"], {"to": "pkg.maps"}, loader=ArtifactLoader(host))
	assert exc.value.pattern == "g(1)"
	assert host.requested == []


def test_unknown_target_module_propagates(loader: ArtifactLoader) -> None:
	with pytest.raises(ModuleUnavailable) as exc:
		generate_delegates("f(a)", {"to": "nowhere.mod"}, loader=loader)
	assert exc.value.module_id == "nowhere.mod"


def test_generation_is_idempotent(maps_module: str, loader: ArtifactLoader) -> None:
	patterns = [CallPattern("parse", ("v",)), "fetch(url)", "g(a, b)"]
	first = generate_delegates(patterns, {"to": maps_module}, loader=loader)
	second = generate_delegates(patterns, {"to": maps_module}, loader=loader)
	assert first == second


def test_overloads_and_async_kind(maps_module: str, loader: ArtifactLoader) -> None:
	parse, fetch = generate_delegates(["parse(v)", "fetch(url)"], {"to": maps_module}, loader=loader)
	assert [c.render() for c in parse.specs] == ["parse(int) -> int", "parse(str) -> str"]
	assert parse.kind == "def"
	assert fetch.kind == "async def"


def test_callbacks_follow_spec_mode(maps_module: str, loader: ArtifactLoader) -> None:
	plain = _single(generate_delegates("get(key)", {"to": maps_module}, loader=loader))
	assert plain.specs == ()
	with_callbacks = _single(
		generate_delegates("get(key)", {"to": maps_module}, loader=loader, spec_mode=SpecMode.SPEC_AND_CALLBACK)
	)
	assert [c.render() for c in with_callbacks.specs] == ["get(str) -> int"]


def test_generate_from_manifest(maps_module: str, loader: ArtifactLoader) -> None:
	manifest = parse_manifest(
		"delegate f(a, b), bare(x) to pkg.maps\n"
		"delegate store(opts, key, value) to pkg.maps as put append_first\n",
		path="maps.delegates",
	)
	defs = generate_from_manifest(manifest, loader=loader)
	assert [d.public_name for d in defs] == ["f", "bare", "store"]
	assert defs[2].call_expression() == "pkg.maps.put(key, value, opts)"
	assert defs[2].doc == "Store value under key."


def test_manifest_configuration_errors_carry_location(maps_module: str, loader: ArtifactLoader) -> None:
	manifest = parse_manifest("delegate f(a) to pkg.maps\n\ndelegate g(a)\n", path="maps.delegates")
	with pytest.raises(ConfigurationError) as exc:
		generate_from_manifest(manifest, loader=loader)
	assert exc.value.path == "maps.delegates"
	assert exc.value.line == 3


def test_suppressed_async_target_keeps_async_kind(write_module: Callable[[str, str], Path], loader: ArtifactLoader) -> None:
	write_module(
		"pkg.jobs",
		'from facadegen import nodoc\n\n@nodoc\nasync def run(job: str) -> None:\n    """Internal."""\n',
	)
	defn = _single(generate_delegates("run(job)", {"to": "pkg.jobs"}, loader=loader))
	assert defn.kind == "async def"
	assert defn.doc == MISSING_DOCS
