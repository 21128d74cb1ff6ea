"""Scaffold Sync: Copier template updates as reviewable change sets."""

from .artifacts import artifact_error, update_artifacts
from .command import CommandBuildError, CommandSpec, build_command
from .config import CopierOptions, Settings, SyncConfig, UpdateConfig, load_config
from .schema import (
    ArtifactError,
    ArtifactResult,
    DependencyUpdate,
    FileAddition,
    FileDeletion,
    Notice,
    Outcome,
    UpdateArtifactsResult,
    UpdateRequest,
)

__all__ = [
    "ArtifactError",
    "ArtifactResult",
    "CommandBuildError",
    "CommandSpec",
    "CopierOptions",
    "DependencyUpdate",
    "FileAddition",
    "FileDeletion",
    "Notice",
    "Outcome",
    "Settings",
    "SyncConfig",
    "UpdateArtifactsResult",
    "UpdateConfig",
    "UpdateRequest",
    "artifact_error",
    "build_command",
    "load_config",
    "update_artifacts",
]
