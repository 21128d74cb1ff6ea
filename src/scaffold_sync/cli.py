"""CLI commands for updating Copier-managed repositories."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

import typer

from .artifacts import update_artifacts
from .config import ConfigError, DEFAULT_CONFIG_NAME, SyncConfig, load_config
from .extract import DEFAULT_FILE_PATTERNS, PackageDependency, extract_package_file
from .schema import DependencyUpdate, Outcome, UpdateRequest
from .tools.vcs import GitError, GitRepository

APP_HELP = "Scaffold Sync CLI entry point."
PACKAGE_LOGGER = "scaffold_sync"

app = typer.Typer(help=APP_HELP)


@app.callback()
def main(
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        help="Logging level for diagnostic output.",
    ),
) -> None:
    """Set the diagnostic log level before running a command."""
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise typer.BadParameter(f"Unknown log level: {log_level}", param_hint="--log-level")
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)


def _open_repository(repo: Optional[str]) -> GitRepository:
    try:
        return GitRepository.discover(repo)
    except GitError as error:
        typer.echo(f"Failed to open repository: {error}")
        raise typer.Exit(code=1)


def _load_sync_config(config: Optional[str], repo_root: Path) -> SyncConfig:
    """Load the explicit config, else the default file in the repository, else defaults."""
    if config:
        config_path: Optional[Path] = Path(config)
    else:
        candidate = repo_root / DEFAULT_CONFIG_NAME
        config_path = candidate if candidate.exists() else None
    try:
        return load_config(config_path)
    except ConfigError as error:
        raise typer.BadParameter(str(error)) from error


def _discover_answers_files(repo_root: Path) -> List[Path]:
    found: Dict[Path, None] = {}
    for pattern in DEFAULT_FILE_PATTERNS:
        for path in sorted(repo_root.glob(pattern)):
            if path.is_file():
                found[path] = None
    return list(found)


def _read_dependency(path: Path, repo_root: Path) -> PackageDependency | None:
    try:
        relative = path.resolve().relative_to(repo_root).as_posix()
    except ValueError:
        relative = path.as_posix()
    return extract_package_file(path.read_text(encoding="utf-8"), relative)


@app.command()
def extract(
    answers_file: Optional[str] = typer.Argument(
        None,
        help="Answers file to inspect. Defaults to every .copier-answers*.yml in the repository root.",
    ),
    repo: Optional[str] = typer.Option(None, "--repo", help="Repository root (defaults to the current one)."),
) -> None:
    """Print the template dependency recorded in answers files."""
    repository = _open_repository(repo)
    if answers_file:
        paths = [repository.root / answers_file]
    else:
        paths = _discover_answers_files(repository.root)

    dependencies = []
    for path in paths:
        if not path.is_file():
            typer.echo(f"Answers file not found: {path}")
            raise typer.Exit(code=1)
        dependency = _read_dependency(path, repository.root)
        if dependency is not None:
            dependencies.append(dependency.to_dict())

    typer.echo(json.dumps(dependencies, indent=2))


@app.command()
def update(
    answers_file: str = typer.Argument(..., help="Answers file path relative to the repository root."),
    to: str = typer.Option(..., "--to", help="Template version (git ref) to update to."),
    dep_name: Optional[str] = typer.Option(None, "--dep-name", help="Template name used in log messages."),
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help=f"Path to the configuration file (defaults to {DEFAULT_CONFIG_NAME} in the repository).",
    ),
    repo: Optional[str] = typer.Option(None, "--repo", help="Repository root (defaults to the current one)."),
) -> None:
    """Update the template behind ANSWERS_FILE and print the resulting change set."""
    repository = _open_repository(repo)
    sync_config = _load_sync_config(config, repository.root)

    request = UpdateRequest(
        package_file_name=answers_file,
        updated_deps=[DependencyUpdate(dep_name=dep_name or answers_file, new_version=to)],
        config=sync_config.update,
    )
    result = update_artifacts(request, repo=repository, settings=sync_config.settings)

    typer.echo(json.dumps(result.to_dict(), indent=2))
    if result.outcome in (Outcome.INPUT_REJECTED, Outcome.FAILED):
        raise typer.Exit(code=1)


@app.command()
def status(
    repo: Optional[str] = typer.Option(None, "--repo", help="Repository root (defaults to the current one)."),
) -> None:
    """Report the working tree delta the reconciler would see."""
    repository = _open_repository(repo)
    try:
        delta = repository.status()
    except GitError as error:
        typer.echo(f"Failed to read repository status: {error}")
        raise typer.Exit(code=1)

    for bucket, paths in delta.to_dict().items():
        typer.echo(f"{bucket}: {len(paths)}")
        for path in paths:
            typer.echo(f"  - {path}")


def run() -> None:
    """Console entry point: route log records to stderr, then dispatch."""
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    app()


if __name__ == "__main__":
    run()
