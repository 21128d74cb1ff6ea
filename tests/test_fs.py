from __future__ import annotations

from pathlib import Path

import pytest

from scaffold_sync.tools.fs import (
    FILE_ACCESS_VIOLATION_ERROR,
    PathViolationError,
    ensure_local_path,
    read_local_file,
    read_local_files,
)


def test_ensure_local_path_accepts_nested_paths(tmp_path: Path) -> None:
    assert ensure_local_path("a/b/../c.txt", tmp_path) == (tmp_path / "a" / "c.txt").resolve()


@pytest.mark.parametrize("candidate", ["../escape.txt", "/etc/passwd", "a/../../escape.txt"])
def test_ensure_local_path_rejects_escapes(tmp_path: Path, candidate: str) -> None:
    with pytest.raises(PathViolationError) as excinfo:
        ensure_local_path(candidate, tmp_path)

    assert str(excinfo.value) == FILE_ACCESS_VIOLATION_ERROR
    assert excinfo.value.path == candidate


def test_read_local_files_preserves_order(tmp_path: Path) -> None:
    names = [f"file-{index}.txt" for index in range(12)]
    for index, name in enumerate(names):
        (tmp_path / name).write_bytes(f"payload {index}".encode("utf-8"))

    contents = read_local_files(list(reversed(names)), tmp_path)

    assert contents == [f"payload {index}".encode("utf-8") for index in reversed(range(12))]
    assert read_local_files([], tmp_path) == []


def test_read_local_file_missing_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        read_local_file("missing.txt", tmp_path)
