from __future__ import annotations

import os
from pathlib import Path

import pytest


BASE_MTIME_NS = 1_700_000_000 * 1_000_000_000


def _set_mtime(path: Path, mtime_ns: int) -> None:
    os.utime(path, ns=(mtime_ns, mtime_ns))


@pytest.fixture
def make_file():
    """Write ``data`` to ``path`` and pin its mtime so comparisons are deterministic."""

    def _make(path: Path, data: bytes = b"", *, mtime_ns: int = BASE_MTIME_NS) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        _set_mtime(path, mtime_ns)
        return path

    return _make


@pytest.fixture
def set_mtime():
    return _set_mtime


@pytest.fixture
def watched_dir(tmp_path: Path) -> Path:
    root = tmp_path / "D"
    root.mkdir()
    return root
