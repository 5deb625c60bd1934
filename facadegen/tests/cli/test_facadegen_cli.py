# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import ast
import json
import os
from pathlib import Path

import pytest

from facadegen.cli import main
from facadegen.config import ENV_BUILD_DIR, ENV_INCLUDE_CALLBACKS, ENV_MODULE_PATH, FacadeConfig
from facadegen.metadata.lookup import MISSING_DOCS, SpecMode


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
	for name in (ENV_MODULE_PATH, ENV_BUILD_DIR, ENV_INCLUDE_CALLBACKS):
		monkeypatch.delenv(name, raising=False)


def _run(argv: list[str], capsys: pytest.CaptureFixture[str]) -> tuple[int, str, str]:
	rc = main(argv)
	out, err = capsys.readouterr()
	return rc, out, err


def test_config_from_env_and_overrides(tmp_path: Path) -> None:
	env = {
		ENV_MODULE_PATH: os.pathsep.join([str(tmp_path / "a"), str(tmp_path / "b")]),
		ENV_BUILD_DIR: str(tmp_path / "build"),
		ENV_INCLUDE_CALLBACKS: "yes",
	}
	cfg = FacadeConfig.from_env(env)
	assert cfg.module_paths == (tmp_path / "a", tmp_path / "b")
	assert cfg.build_dir == tmp_path / "build"
	assert cfg.spec_mode is SpecMode.SPEC_AND_CALLBACK

	cfg = cfg.with_overrides(module_paths=[tmp_path / "cli"], include_callbacks=False)
	assert cfg.module_paths[0] == tmp_path / "cli"
	assert cfg.spec_mode is SpecMode.SPEC
	assert FacadeConfig.from_env({}) == FacadeConfig()


def test_generate_writes_facade(
	maps_module: str, module_root: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
	manifest = tmp_path / "maps.delegates"
	manifest.write_text("delegate g(a, b) to pkg.maps as f\n", encoding="utf-8")
	out_path = tmp_path / "out" / "facade.py"
	rc, out, err = _run(["generate", str(manifest), "-M", str(module_root), "-o", str(out_path)], capsys)
	assert rc == 0, err
	assert out == ""
	source = out_path.read_text(encoding="utf-8")
	assert source.startswith("# Generated by facadegen from maps.delegates. Do not edit.\n")
	fn = ast.parse(source).body[-1]
	assert ast.get_docstring(fn) == "computes f"


def test_generate_to_stdout(maps_module: str, module_root: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	manifest = tmp_path / "maps.delegates"
	manifest.write_text("delegate bare(x) to pkg.maps\n", encoding="utf-8")
	rc, out, _err = _run(["generate", str(manifest), "-M", str(module_root), "--moduledoc", "Maps."], capsys)
	assert rc == 0
	assert '"""Maps."""' in out
	assert MISSING_DOCS in out


def test_generate_reports_json_diagnostics(module_root: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	manifest = tmp_path / "bad.delegates"
	manifest.write_text("delegate f(a)\n", encoding="utf-8")
	rc, out, _err = _run(["generate", str(manifest), "-M", str(module_root), "--json"], capsys)
	assert rc == 1
	payload = json.loads(out)
	assert payload["exit_code"] == 1
	(diag,) = payload["diagnostics"]
	assert diag["reason_code"] == "configuration"
	assert diag["path"] == str(manifest)
	assert diag["line"] == 1


def test_missing_manifest_is_reported(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	rc, _out, err = _run(["generate", str(tmp_path / "nope.delegates")], capsys)
	assert rc == 1
	assert err.startswith("error: [configuration] cannot read manifest")


def test_compile_requires_build_dir(maps_module: str, module_root: Path, capsys: pytest.CaptureFixture[str]) -> None:
	rc, _out, err = _run(["compile", maps_module, "-M", str(module_root)], capsys)
	assert rc == 1
	assert "requires --build-dir" in err


def test_compile_writes_artifacts(maps_module: str, module_root: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	build = tmp_path / "build"
	rc, out, _err = _run(["compile", maps_module, "-M", str(module_root), "--build-dir", str(build)], capsys)
	assert rc == 0
	assert (build / "pkg.maps.fca").is_file()
	module_id, path, digest = out.strip().split("\t")
	assert module_id == "pkg.maps"
	assert path == str(build / "pkg.maps.fca")
	assert digest.startswith("sha256:")


def test_chunks_lists_ids_and_sizes(maps_module: str, module_root: Path, capsys: pytest.CaptureFixture[str]) -> None:
	rc, out, _err = _run(["chunks", maps_module, "-M", str(module_root)], capsys)
	assert rc == 0
	rows = [line.split("\t") for line in out.strip().splitlines()]
	assert [r[0] for r in rows] == ["Docs", "Meta", "Spec"]
	assert all(int(r[1]) > 0 for r in rows)


def test_doc_command(maps_module: str, module_root: Path, capsys: pytest.CaptureFixture[str]) -> None:
	rc, out, _err = _run(["doc", maps_module, "put/3", "-M", str(module_root)], capsys)
	assert rc == 0
	assert out == "def put(key, value, opts)\n\nStore value under key.\n"

	rc, out, _err = _run(["doc", maps_module, "put/2", "-M", str(module_root)], capsys)
	assert out == MISSING_DOCS + "\n"


def test_spec_command(maps_module: str, module_root: Path, capsys: pytest.CaptureFixture[str]) -> None:
	rc, out, _err = _run(["spec", maps_module, "parse/1", "-M", str(module_root)], capsys)
	assert rc == 0
	assert out.splitlines() == ["parse(int) -> int", "parse(str) -> str"]

	rc, out, _err = _run(["spec", maps_module, "get/1", "-M", str(module_root)], capsys)
	assert out == "No specification for pkg.maps.get/1\n"
	rc, out, _err = _run(["spec", maps_module, "get/1", "-M", str(module_root), "--include-callbacks"], capsys)
	assert out == "get(str) -> int\n"


@pytest.mark.parametrize("ref", ["put", "put/x", "9put/1"])
def test_bad_function_reference(maps_module: str, module_root: Path, ref: str, capsys: pytest.CaptureFixture[str]) -> None:
	rc, _out, err = _run(["doc", maps_module, ref, "-M", str(module_root)], capsys)
	assert rc == 1
	assert "expected NAME/ARITY" in err


def test_unknown_module_exit_code(module_root: Path, capsys: pytest.CaptureFixture[str]) -> None:
	rc, _out, err = _run(["chunks", "definitely_missing_mod_xyz", "-M", str(module_root)], capsys)
	assert rc == 1
	assert "[module-unavailable]" in err
