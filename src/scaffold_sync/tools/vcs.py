"""Minimal git helpers
The helpers below provide just enough structure to open a repository, run
git commands and summarise the working tree after a template update.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Sequence

import shutil
import subprocess

_CONFLICT_CODES = frozenset({"DD", "AU", "UD", "UA", "DU", "AA", "UU"})


class GitError(RuntimeError):
    """Raised when a git command fails or the repository cannot be used."""


@dataclass(slots=True)
class RepoStatus:
    """Working tree delta split into the four buckets used for reconciliation.

    Paths are POSIX strings relative to the repository root.  A path never
    appears in ``deleted`` and in one of the other lists at the same time.
    """

    modified: List[str] = field(default_factory=list)
    not_added: List[str] = field(default_factory=list)
    conflicted: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not (self.modified or self.not_added or self.conflicted or self.deleted)

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            "modified": list(self.modified),
            "not_added": list(self.not_added),
            "conflicted": list(self.conflicted),
            "deleted": list(self.deleted),
        }


def parse_porcelain_status(payload: str) -> RepoStatus:
    """Parse ``git status --porcelain=v1 -z`` output into a :class:`RepoStatus`.

    Renames and copies are reported as an addition of the new path; for renames
    the original path is also reported as deleted.
    """

    status = RepoStatus()
    entries = payload.split("\0")
    index = 0
    while index < len(entries):
        entry = entries[index]
        index += 1
        if len(entry) < 4:
            continue
        code = entry[:2]
        path = entry[3:]
        x, y = code[0], code[1]

        if code in _CONFLICT_CODES:
            status.conflicted.append(path)
            continue
        if code == "??":
            status.not_added.append(path)
            continue
        if x in {"R", "C"}:
            original = entries[index] if index < len(entries) else ""
            index += 1
            status.not_added.append(path)
            if x == "R" and original:
                status.deleted.append(original)
            continue
        if "D" in (x, y):
            status.deleted.append(path)
            continue
        if x == "A":
            status.not_added.append(path)
            continue
        if x in {"M", "T"} or y in {"M", "T"}:
            status.modified.append(path)
    return status


class GitRepository:
    """Lightweight wrapper around ``git`` commands."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root).resolve()
        if not (self.root / ".git").exists():
            raise GitError(f"Not a git repository: {self.root}")

    @classmethod
    def discover(cls, start: Path | str | None = None) -> "GitRepository":
        """Locate the nearest git repository starting from ``start``."""

        path = Path(start or Path.cwd()).resolve()
        for candidate in (path, *path.parents):
            if (candidate / ".git").exists():
                return cls(candidate)
        raise GitError(f"Unable to locate a git repository from {path}")

    @classmethod
    def initialise(cls, root: Path | str) -> "GitRepository":
        """Initialise a new git repository at ``root`` with an initial commit."""

        path = Path(root).resolve()
        path.mkdir(parents=True, exist_ok=True)
        git_dir = path / ".git"
        if git_dir.exists():
            shutil.rmtree(git_dir)

        _run_git_command(path, ["init"])

        def _ensure_config(key: str, value: str) -> None:
            probe = _run_git_command(path, ["config", "--get", key], check=False)
            if probe.returncode != 0 or not probe.stdout.strip():
                _run_git_command(path, ["config", key, value])

        _ensure_config("user.email", "scaffold-sync@example.com")
        _ensure_config("user.name", "Scaffold Sync")

        _run_git_command(path, ["add", "."])
        _run_git_command(path, ["commit", "--allow-empty", "-m", "Initial commit"])

        return cls(path)

    # ------------------------------------------------------------------ git IO
    def git(self, *args: str, check: bool = True) -> subprocess.CompletedProcess[str]:
        """Execute ``git`` with ``args`` relative to the repository root."""

        return _run_git_command(self.root, list(args), check=check)

    # ------------------------------------------------------------- repo status
    def status(self) -> RepoStatus:
        """Return the working tree delta relative to ``HEAD``."""

        result = self.git("status", "--porcelain=v1", "-z", "--untracked-files=all")
        return parse_porcelain_status(result.stdout)

    def commit_all(self, message: str, *, allow_empty: bool = False) -> str | None:
        """Add all changes to the index and create a commit.

        Returns the new commit SHA when a commit was created.  Returns ``None`` when
        there were no changes to commit (and ``allow_empty`` is ``False``).
        """

        self.git("add", "--all")

        commit_args: List[str] = ["commit", "-m", message]
        if allow_empty:
            commit_args.append("--allow-empty")

        commit = self.git(*commit_args, check=False)
        if commit.returncode != 0:
            output = commit.stderr.strip() or commit.stdout.strip() or ""
            if "nothing to commit" in output.lower():
                return None
            raise GitError(f"git commit failed: {output}")

        rev = self.git("rev-parse", "HEAD")
        return rev.stdout.strip()


def _run_git_command(
    cwd: Path,
    args: Sequence[str],
    *,
    check: bool = True,
) -> subprocess.CompletedProcess[str]:
    command = ["git", *args]
    try:
        process = subprocess.run(
            command,
            cwd=cwd,
            capture_output=True,
            text=False,
            check=False,
        )
    except OSError as error:
        raise GitError(f"Unable to run git: {error}") from error
    stdout = process.stdout.decode("utf-8", errors="replace") if process.stdout else ""
    stderr = process.stderr.decode("utf-8", errors="replace") if process.stderr else ""
    result = subprocess.CompletedProcess(process.args, process.returncode, stdout, stderr)
    if check and result.returncode != 0:
        message = result.stderr.strip() or result.stdout.strip() or "unknown git error"
        raise GitError(f"git {' '.join(args)} failed: {message}")
    return result


__all__ = ["GitError", "GitRepository", "RepoStatus", "parse_porcelain_status"]
