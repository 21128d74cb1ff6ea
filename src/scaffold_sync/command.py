"""Translate update configuration into a ``copier`` invocation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Tuple

import shlex

from .config import Settings, UpdateConfig
from .tools.fs import PathViolationError, ensure_local_path


class CommandBuildError(RuntimeError):
    """Raised when the configuration cannot be turned into a command."""


class BoolOption(str, Enum):
    """Boolean Copier options that map to a bare flag."""

    SKIP_TASKS = "skip_tasks"


class ListOption(str, Enum):
    """List-valued Copier options that map to a repeated flag/value pair."""

    SKIP = "skip"
    EXCLUDE = "exclude"


BOOL_FLAGS: Dict[BoolOption, str] = {
    BoolOption.SKIP_TASKS: "--skip-tasks",
}

LIST_FLAGS: Dict[ListOption, str] = {
    ListOption.SKIP: "--skip",
    ListOption.EXCLUDE: "--exclude",
}

DEFAULT_COMMAND_OPTIONS: Tuple[str, ...] = ("--skip-answered", "--defaults")


@dataclass(slots=True, frozen=True)
class CommandSpec:
    """Ordered, already-quoted command tokens."""

    tokens: Tuple[str, ...]

    def render(self) -> str:
        return " ".join(self.tokens)

    def __str__(self) -> str:
        return self.render()


def should_trust(config: UpdateConfig, settings: Settings) -> bool:
    """Templates may run their own code only when scripts are globally allowed."""
    return settings.allow_scripts and not config.ignore_scripts


def build_command(
    config: UpdateConfig,
    package_file_name: str,
    new_version: str,
    *,
    settings: Settings,
    repo_root: Path,
) -> CommandSpec:
    """Assemble the ``copier update`` (or ``recopy``) command for one answers file."""
    options = config.copier_options
    command = ["copier"]
    if options.recopy:
        command.extend(["recopy", *DEFAULT_COMMAND_OPTIONS, "--overwrite"])
    else:
        command.extend(["update", *DEFAULT_COMMAND_OPTIONS])

    if should_trust(config, settings):
        command.append("--trust")

    for option, flag in BOOL_FLAGS.items():
        if getattr(options, option.value):
            command.append(flag)

    if options.data_file:
        try:
            ensure_local_path(options.data_file, repo_root)
        except PathViolationError as error:
            raise CommandBuildError("copier_options.data_file is not part of the repository") from error
        except (OSError, ValueError, RuntimeError) as error:
            raise CommandBuildError(f"Invalid copier_options.data_file: {error}") from error
        command.extend(["--data-file", shlex.quote(options.data_file)])

    for key, value in options.data.items():
        command.extend(["--data", shlex.quote(f"{key}={value}")])

    for option, flag in LIST_FLAGS.items():
        for item in getattr(options, option.value):
            command.extend([flag, shlex.quote(item)])

    command.extend(
        [
            "--answers-file",
            shlex.quote(package_file_name),
            "--vcs-ref",
            shlex.quote(new_version),
        ]
    )
    return CommandSpec(tuple(command))


__all__ = [
    "BOOL_FLAGS",
    "BoolOption",
    "CommandBuildError",
    "CommandSpec",
    "DEFAULT_COMMAND_OPTIONS",
    "LIST_FLAGS",
    "ListOption",
    "build_command",
    "should_trust",
]
