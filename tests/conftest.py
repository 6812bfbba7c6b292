"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from collections.abc import Callable, Generator, Mapping
from pathlib import Path

import pytest

from disk_scan.core.filesystem.walker import WalkerPool


def write_file(path: Path, size: int) -> Path:
    """Create a file of exactly ``size`` bytes, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    _ = path.write_bytes(b"x" * size)
    return path


def build_tree(base: Path, layout: Mapping[str, int | None]) -> Path:
    """Create a directory tree from a mapping of relative paths.

    Integer values create files of that many bytes; None creates a directory.
    """
    for relative, size in layout.items():
        target = base / relative
        if size is None:
            target.mkdir(parents=True, exist_ok=True)
        else:
            _ = write_file(target, size)
    return base


@pytest.fixture
def pool() -> Generator[WalkerPool, None, None]:
    """Provide a small walker pool shut down after the test."""
    walker_pool = WalkerPool(max_workers=4)
    try:
        yield walker_pool
    finally:
        walker_pool.shutdown()


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """Provide a root with a populated, an empty and an excluded child.

    Layout:
        a/  three files totalling 2048 bytes (one nested, one hidden)
        b/  empty
        c/  one 4096-byte file, meant to be excluded
    """
    root = tmp_path / "root"
    return build_tree(
        root,
        {
            "a/one.bin": 1000,
            "a/nested/two.bin": 1000,
            "a/.hidden": 48,
            "b": None,
            "c/big.bin": 4096,
        },
    )


@pytest.fixture
def make_file() -> Callable[[Path, int], Path]:
    """Provide a helper creating files of an exact size."""
    return write_file


@pytest.fixture
def make_tree() -> Callable[[Path, Mapping[str, int | None]], Path]:
    """Provide a helper creating directory trees from a layout mapping."""
    return build_tree
