"""Configuration models for Copier template updates."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Literal, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

BinarySource = Literal["global", "install", "docker"]

DEFAULT_CONFIG_NAME = "scaffold-sync.yaml"
DEFAULT_DOCKER_IMAGE = "ghcr.io/containerbase/sidecar"
DEFAULT_EXEC_TIMEOUT = 900.0


class ConfigError(RuntimeError):
    """Raised when a configuration file cannot be loaded or validated."""


class ConfigModel(BaseModel):
    """Base model rejecting unknown keys."""

    model_config = ConfigDict(extra="forbid", frozen=False)


class CopierOptions(ConfigModel):
    """Pass-through options translated into ``copier`` command-line flags."""

    recopy: bool = False
    skip_tasks: bool = False
    data: Dict[str, str] = Field(default_factory=dict)
    data_file: Optional[str] = None
    skip: List[str] = Field(default_factory=list)
    exclude: List[str] = Field(default_factory=list)


class UpdateConfig(ConfigModel):
    """Per-request settings for a single answers-file update."""

    copier_options: CopierOptions = Field(default_factory=CopierOptions)
    ignore_scripts: bool = False
    constraints: Dict[str, str] = Field(default_factory=dict)
    env: Dict[str, str] = Field(default_factory=dict)


class Settings(ConfigModel):
    """Global settings shared by every update request."""

    allow_scripts: bool = False
    binary_source: BinarySource = "global"
    docker_image: str = DEFAULT_DOCKER_IMAGE
    exec_timeout: Optional[float] = DEFAULT_EXEC_TIMEOUT


class SyncConfig(ConfigModel):
    """Top-level layout of ``scaffold-sync.yaml``."""

    settings: Settings = Field(default_factory=Settings)
    update: UpdateConfig = Field(default_factory=UpdateConfig)


def parse_config(data: Mapping[str, Any] | None) -> SyncConfig:
    """Validate a raw mapping into a :class:`SyncConfig`."""
    try:
        return SyncConfig.model_validate(dict(data or {}))
    except ValidationError as error:
        raise ConfigError(f"Invalid configuration: {error}") from error


def load_config(config_path: Path | str | None) -> SyncConfig:
    """Load YAML configuration from disk.

    A ``None`` path yields the built-in defaults.
    """
    if config_path is None:
        return SyncConfig()

    path = Path(config_path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except yaml.YAMLError as error:
        raise ConfigError(f"Failed to parse config: {error}") from error

    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping at the top level.")

    return parse_config(data)


__all__ = [
    "BinarySource",
    "ConfigError",
    "CopierOptions",
    "DEFAULT_CONFIG_NAME",
    "Settings",
    "SyncConfig",
    "UpdateConfig",
    "load_config",
    "parse_config",
]
