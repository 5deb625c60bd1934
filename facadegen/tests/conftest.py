# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from facadegen.artifacts.cache import ArtifactCache
from facadegen.artifacts.loader import ArtifactLoader, SourceHost

MAPS_SOURCE = '''
"""Helpers for maps."""
from typing import Any, Protocol, overload

from facadegen import nodoc


def f(a: int, b: int) -> int:
    """computes f"""
    return a + b


def put(key: str, value: int, opts: dict[str, Any]) -> dict[str, Any]:
    """Store value under key."""
    return {**opts, key: value}


def bare(x):
    return x


@nodoc
def hidden(x: int) -> int:
    """Internal helper."""
    return x


@overload
def parse(v: int) -> int: ...
@overload
def parse(v: str) -> str: ...
def parse(v):
    """Parse a value."""
    return v


async def fetch(url: str) -> bytes:
    """Fetch bytes."""
    return url.encode()


class Store(Protocol):
    def get(self, key: str) -> int: ...
'''.lstrip()


def _write_file(path: Path, text: str) -> None:
	path.parent.mkdir(parents=True, exist_ok=True)
	path.write_text(text, encoding="utf-8")


@pytest.fixture
def module_root(tmp_path: Path) -> Path:
	root = tmp_path / "src"
	root.mkdir()
	return root


@pytest.fixture
def write_module(module_root: Path) -> Callable[[str, str], Path]:
	"""Write `source` as module `module_id` under `module_root` (packages get `__init__.py`)."""

	def write(module_id: str, source: str) -> Path:
		parts = module_id.split(".")
		for i in range(1, len(parts)):
			init = module_root.joinpath(*parts[:i], "__init__.py")
			if not init.exists():
				_write_file(init, "")
		path = module_root.joinpath(*parts).with_suffix(".py")
		_write_file(path, source)
		return path

	return write


@pytest.fixture
def loader(module_root: Path) -> ArtifactLoader:
	host = SourceHost(module_paths=[module_root], use_import_system=False)
	return ArtifactLoader(host, cache=ArtifactCache())


@pytest.fixture
def maps_module(write_module: Callable[[str, str], Path]) -> str:
	write_module("pkg.maps", MAPS_SOURCE)
	return "pkg.maps"


@pytest.fixture
def maps_source() -> str:
	return MAPS_SOURCE
