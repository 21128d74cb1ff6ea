"""Subprocess execution for external tools with optional isolation."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Sequence

import logging
import os
import shlex
import subprocess

from ..config import BinarySource

LOGGER = logging.getLogger(__name__)

DOCKER_WORKDIR = "/tmp/scaffold-sync/repo"


class ExecError(RuntimeError):
    """Raised when a command exits non-zero, times out or cannot be started."""

    def __init__(
        self,
        message: str,
        *,
        exit_code: int | None = None,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr


@dataclass(slots=True, frozen=True)
class ToolConstraint:
    """Version requirement for a tool the command depends on."""

    tool_name: str
    constraint: str | None = None


@dataclass(slots=True)
class ExecOptions:
    """Execution context for :func:`exec_command`."""

    cwd: Path
    extra_env: Mapping[str, str] = field(default_factory=dict)
    tool_constraints: Sequence[ToolConstraint] = ()
    binary_source: BinarySource = "global"
    docker_image: str | None = None
    timeout: float | None = None


@dataclass(slots=True)
class ExecResult:
    """Captured output of a successful command."""

    command: str
    stdout: str
    stderr: str


def _merge_env(extra: Mapping[str, str] | None) -> Dict[str, str]:
    """Merge provided environment overrides with the current process state."""
    env: Dict[str, str] = os.environ.copy()
    if extra:
        env.update({str(key): str(value) for key, value in extra.items()})
    return env


def _install_commands(constraints: Sequence[ToolConstraint]) -> list[str]:
    commands: list[str] = []
    for item in constraints:
        if item.constraint:
            commands.append(f"install-tool {shlex.quote(item.tool_name)} {shlex.quote(item.constraint)}")
        else:
            commands.append(f"install-tool {shlex.quote(item.tool_name)}")
    return commands


def build_script(command: str, options: ExecOptions) -> str:
    """Return the shell script executed for ``command`` under ``options``."""

    if options.binary_source == "global":
        return command
    return " && ".join([*_install_commands(options.tool_constraints), command])


def build_docker_command(script: str, options: ExecOptions) -> list[str]:
    """Wrap ``script`` into a ``docker run`` invocation mounting the repository."""

    if not options.docker_image:
        raise ExecError("binary_source 'docker' requires a docker image")
    argv = [
        "docker",
        "run",
        "--rm",
        "-v",
        f"{Path(options.cwd).resolve()}:{DOCKER_WORKDIR}",
        "-w",
        DOCKER_WORKDIR,
    ]
    for key in sorted(options.extra_env):
        argv.extend(["-e", f"{key}={options.extra_env[key]}"])
    argv.extend([options.docker_image, "bash", "-l", "-c", script])
    return argv


def exec_command(command: str, options: ExecOptions) -> ExecResult:
    """Run ``command`` through a shell and raise :class:`ExecError` on failure."""

    script = build_script(command, options)
    if options.binary_source == "global" and options.tool_constraints:
        LOGGER.debug(
            "Ignoring tool constraints for global binaries: %s",
            ", ".join(f"{item.tool_name}={item.constraint}" for item in options.tool_constraints),
        )

    argv: str | list[str]
    if options.binary_source == "docker":
        argv = build_docker_command(script, options)
        use_shell = False
    else:
        argv = script
        use_shell = True

    LOGGER.debug("Executing command: %s", script)
    try:
        process = subprocess.run(
            argv,
            shell=use_shell,
            cwd=options.cwd,
            env=_merge_env(options.extra_env),
            capture_output=True,
            text=False,
            timeout=options.timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as error:
        raise ExecError(f"Command timed out after {options.timeout}s: {command}") from error
    except OSError as error:
        raise ExecError(f"Unable to run command: {error}") from error

    stdout = process.stdout.decode("utf-8", errors="replace") if process.stdout else ""
    stderr = process.stderr.decode("utf-8", errors="replace") if process.stderr else ""
    if process.returncode != 0:
        detail = stderr.strip() or stdout.strip()
        message = f"Command failed with exit code {process.returncode}: {command}"
        if detail:
            message = f"{message}\n{detail}"
        raise ExecError(message, exit_code=process.returncode, stdout=stdout, stderr=stderr)
    return ExecResult(command=command, stdout=stdout, stderr=stderr)


__all__ = [
    "ExecError",
    "ExecOptions",
    "ExecResult",
    "ToolConstraint",
    "build_docker_command",
    "build_script",
    "exec_command",
]
