"""Run a Copier template update and turn the working tree into a change set."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, List, Protocol, Sequence

import logging

from .command import CommandBuildError, CommandSpec, build_command
from .config import Settings, UpdateConfig
from .schema import (
    CONFLICT_NOTICE,
    ArtifactError,
    ArtifactResult,
    FileAddition,
    FileDeletion,
    Notice,
    Outcome,
    UpdateArtifactsResult,
    UpdateRequest,
)
from .tools.exec import ExecError, ExecOptions, ToolConstraint, exec_command
from .tools.fs import PathViolationError, read_local_files
from .tools.vcs import GitError, RepoStatus

LOGGER = logging.getLogger(__name__)

CONSTRAINED_TOOLS = ("python", "copier")

Runner = Callable[[str, ExecOptions], Any]
Loader = Callable[[Sequence[str], Path], List[bytes]]


class StatusSource(Protocol):
    root: Path

    def status(self) -> RepoStatus: ...


def artifact_error(package_file_name: str, message: str) -> List[UpdateArtifactsResult]:
    """Wrap ``message`` into the single-entry failure result."""
    return [UpdateArtifactsResult(artifact_error=ArtifactError(lock_file=package_file_name, stderr=message))]


def _failure(outcome: Outcome, package_file_name: str, message: str) -> ArtifactResult:
    return ArtifactResult(outcome, tuple(artifact_error(package_file_name, message)))


def _exec_options(config: UpdateConfig, settings: Settings, repo_root: Path) -> ExecOptions:
    constraints = [
        ToolConstraint(tool_name=tool, constraint=config.constraints.get(tool))
        for tool in CONSTRAINED_TOOLS
    ]
    return ExecOptions(
        cwd=repo_root,
        extra_env=dict(config.env),
        tool_constraints=tuple(constraints),
        binary_source=settings.binary_source,
        docker_image=settings.docker_image,
        timeout=settings.exec_timeout,
    )


def format_conflict_summary(conflicted: Sequence[str]) -> str:
    """Describe the conflicting files reported by Copier."""
    return (
        f"Updating the Copier template yielded {len(conflicted)} merge conflicts. "
        "Please check the proposed changes carefully! Conflicting files:\n  * "
        + "\n  * ".join(conflicted)
    )


def update_artifacts(
    request: UpdateRequest,
    *,
    repo: StatusSource,
    settings: Settings | None = None,
    runner: Runner = exec_command,
    loader: Loader = read_local_files,
) -> ArtifactResult:
    """Update the template behind ``request.package_file_name``.

    The answers file pins exactly one template, so ``request.updated_deps`` must
    hold a single entry.  Failures never raise: they are returned as a
    one-entry result carrying an artifact error.  When Copier leaves the answers
    file untouched nothing was updated and ``NO_CHANGE`` is returned.
    """
    settings = settings or Settings()
    package_file_name = request.package_file_name
    updated_deps = request.updated_deps

    if len(updated_deps) != 1:
        return _failure(
            Outcome.INPUT_REJECTED,
            package_file_name,
            f"Unexpected number of dependencies: {len(updated_deps)} (should be 1)",
        )

    dependency = updated_deps[0]
    new_version = dependency.target_version
    if not new_version:
        return _failure(
            Outcome.INPUT_REJECTED,
            package_file_name,
            "Missing copier template version to update to",
        )

    repo_root = Path(repo.root)
    command: CommandSpec
    try:
        command = build_command(
            request.config,
            package_file_name,
            new_version,
            settings=settings,
            repo_root=repo_root,
        )
    except (CommandBuildError, PathViolationError) as error:
        LOGGER.error("Failed to build copier command: %s", error, exc_info=True)
        return _failure(Outcome.FAILED, package_file_name, str(error))

    try:
        runner(command.render(), _exec_options(request.config, settings, repo_root))
    except (ExecError, OSError) as error:
        LOGGER.error("Failed to update copier template: %s", error)
        return _failure(Outcome.FAILED, package_file_name, str(error))

    try:
        status = repo.status()
    except GitError as error:
        LOGGER.error("Failed to read repository status: %s", error)
        return _failure(Outcome.FAILED, package_file_name, str(error))

    if package_file_name not in status.modified:
        LOGGER.debug("Answers file %s unchanged; copier did not update anything", package_file_name)
        return ArtifactResult.no_change()

    if status.conflicted:
        # Copier sometimes reports conflicts that are not real.
        LOGGER.warning(
            format_conflict_summary(status.conflicted),
            extra={"package_file": package_file_name, "dep_name": dependency.dep_name},
        )

    # A path reported in several buckets is emitted once, at its first position.
    additions = list(dict.fromkeys([*status.modified, *status.not_added, *status.conflicted]))
    try:
        contents = loader(additions, repo_root)
    except (OSError, PathViolationError) as error:
        LOGGER.error("Failed to read updated files: %s", error)
        return _failure(Outcome.FAILED, package_file_name, str(error))

    conflicted = set(status.conflicted)
    results: List[UpdateArtifactsResult] = []
    for path, body in zip(additions, contents):
        notice = Notice(file=path, message=CONFLICT_NOTICE) if path in conflicted else None
        results.append(UpdateArtifactsResult(file=FileAddition(path=path, contents=body), notice=notice))
    for path in status.deleted:
        results.append(UpdateArtifactsResult(file=FileDeletion(path=path)))
    return ArtifactResult.changed(results)


__all__ = ["artifact_error", "format_conflict_summary", "update_artifacts"]
