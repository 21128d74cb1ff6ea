from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from scaffold_sync.config import ConfigError, SyncConfig, load_config, parse_config


def test_load_config_reads_yaml(tmp_path: Path) -> None:
    config_path = tmp_path / "scaffold-sync.yaml"
    config_path.write_text(
        textwrap.dedent(
            """
            settings:
              allow_scripts: true
              binary_source: docker
            update:
              constraints:
                copier: 9.4.1
              copier_options:
                skip_tasks: true
                skip: [README.md]
                data:
                  project_name: demo
            """
        ),
        encoding="utf-8",
    )

    config = load_config(config_path)

    assert config.settings.allow_scripts is True
    assert config.settings.binary_source == "docker"
    assert config.update.constraints == {"copier": "9.4.1"}
    assert config.update.copier_options.skip == ["README.md"]
    assert config.update.copier_options.data == {"project_name": "demo"}
    assert config.update.copier_options.recopy is False


def test_load_config_defaults_without_path() -> None:
    assert load_config(None) == SyncConfig()


def test_load_config_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Config file not found"):
        load_config(tmp_path / "missing.yaml")


def test_load_config_rejects_non_mapping(tmp_path: Path) -> None:
    config_path = tmp_path / "scaffold-sync.yaml"
    config_path.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="mapping"):
        load_config(config_path)


def test_parse_config_rejects_unknown_options() -> None:
    with pytest.raises(ConfigError, match="Invalid configuration"):
        parse_config({"update": {"copier_options": {"no_such_flag": True}}})


def test_parse_config_rejects_unknown_binary_source() -> None:
    with pytest.raises(ConfigError):
        parse_config({"settings": {"binary_source": "hermit"}})
