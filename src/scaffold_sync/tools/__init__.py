"""Tool integrations used by the updater: process execution, git and file access."""

from .exec import ExecError, ExecOptions, ExecResult, ToolConstraint, exec_command
from .fs import PathViolationError, ensure_local_path, read_local_file, read_local_files
from .vcs import GitError, GitRepository, RepoStatus

__all__ = [
    "ExecError",
    "ExecOptions",
    "ExecResult",
    "GitError",
    "GitRepository",
    "PathViolationError",
    "RepoStatus",
    "ToolConstraint",
    "ensure_local_path",
    "exec_command",
    "read_local_file",
    "read_local_files",
]
