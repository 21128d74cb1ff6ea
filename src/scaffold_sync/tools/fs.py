"""Repository-confined file access helpers."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Sequence

FILE_ACCESS_VIOLATION_ERROR = "file-access-violation"


class PathViolationError(RuntimeError):
    """Raised when a path resolves outside of the repository root."""

    def __init__(self, path: str, root: Path) -> None:
        super().__init__(FILE_ACCESS_VIOLATION_ERROR)
        self.path = path
        self.root = root


def ensure_local_path(path: str | Path, root: Path | str) -> Path:
    """Return the absolute location of ``path`` after checking it stays in ``root``."""

    root_path = Path(root).resolve()
    candidate = (root_path / path).resolve()
    if not candidate.is_relative_to(root_path):
        raise PathViolationError(str(path), root_path)
    return candidate


def read_local_file(path: str | Path, root: Path | str) -> bytes:
    """Read the current bytes of a repository-relative file."""

    return ensure_local_path(path, root).read_bytes()


def read_local_files(paths: Sequence[str], root: Path | str, *, max_workers: int = 8) -> List[bytes]:
    """Read several files concurrently, returning contents in input order."""

    if not paths:
        return []
    workers = max(1, min(max_workers, len(paths)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(lambda item: read_local_file(item, root), paths))


__all__ = [
    "FILE_ACCESS_VIOLATION_ERROR",
    "PathViolationError",
    "ensure_local_path",
    "read_local_file",
    "read_local_files",
]
