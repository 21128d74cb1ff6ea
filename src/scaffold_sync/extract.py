"""Read the template reference recorded in a Copier answers file."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import logging
import re

import yaml

LOGGER = logging.getLogger(__name__)

DEFAULT_FILE_PATTERNS: Tuple[str, ...] = (".copier-answers.yml", ".copier-answers.*.yml")

_GITHUB_SHORTHAND = re.compile(r"^gh:(?P<repo>[\w.-]+/[\w.-]+?)(?:\.git)?/?$")
_GITHUB_URL = re.compile(r"^(?:https://|git@)github\.com[/:](?P<repo>[\w.-]+/[\w.-]+?)(?:\.git)?/?$")
_REMOTE_PREFIXES = ("https://", "http://", "git@", "git+", "ssh://", "gl:", "gh:")


@dataclass(slots=True)
class PackageDependency:
    """Template dependency pinned by an answers file."""

    dep_name: str
    package_file: str
    current_value: Optional[str]
    datasource: Optional[str]
    source_url: str
    skip_reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dep_name": self.dep_name,
            "package_file": self.package_file,
            "current_value": self.current_value,
            "datasource": self.datasource,
            "source_url": self.source_url,
            "skip_reason": self.skip_reason,
        }


def extract_package_file(content: str, package_file_name: str) -> PackageDependency | None:
    """Parse an answers file and return the template it was rendered from."""
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as error:
        LOGGER.debug("Failed to parse %s: %s", package_file_name, error)
        return None

    if not isinstance(data, dict):
        LOGGER.debug("Answers file %s is not a mapping", package_file_name)
        return None

    src_path = data.get("_src_path")
    if not isinstance(src_path, str) or not src_path.strip():
        LOGGER.debug("Answers file %s has no _src_path", package_file_name)
        return None
    src_path = src_path.strip()

    commit = data.get("_commit")
    current_value = str(commit) if commit not in (None, "") else None

    match = _GITHUB_SHORTHAND.match(src_path) or _GITHUB_URL.match(src_path)
    if match:
        repo = match.group("repo")
        return PackageDependency(
            dep_name=repo,
            package_file=package_file_name,
            current_value=current_value,
            datasource="github-tags",
            source_url=f"https://github.com/{repo}",
        )

    if src_path.startswith(_REMOTE_PREFIXES):
        return PackageDependency(
            dep_name=src_path,
            package_file=package_file_name,
            current_value=current_value,
            datasource="git-tags",
            source_url=src_path,
        )

    return PackageDependency(
        dep_name=src_path,
        package_file=package_file_name,
        current_value=current_value,
        datasource=None,
        source_url=src_path,
        skip_reason="local-template",
    )


__all__ = ["DEFAULT_FILE_PATTERNS", "PackageDependency", "extract_package_file"]
