"""Typed records exchanged between the reconciler and its callers."""

from __future__ import annotations

import base64
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .config import UpdateConfig

CONFLICT_NOTICE = "This file had merge conflicts. Please check the proposed changes carefully!"


class RecordModel(BaseModel):
    """Base Pydantic model with strict field handling."""

    model_config = ConfigDict(extra="forbid", frozen=False)


class DependencyUpdate(RecordModel):
    """Single template reference scheduled for an update."""

    dep_name: Optional[str] = None
    new_version: Optional[str] = None
    new_value: Optional[str] = None

    @property
    def target_version(self) -> str | None:
        """Return the first non-empty of ``new_version`` and ``new_value``."""
        for candidate in (self.new_version, self.new_value):
            if candidate:
                return candidate
        return None


class UpdateRequest(RecordModel):
    """Everything needed to update one Copier answers file."""

    package_file_name: str
    updated_deps: List[DependencyUpdate] = Field(default_factory=list)
    config: UpdateConfig = Field(default_factory=UpdateConfig)


class Outcome(str, Enum):
    """Terminal states of an update."""

    INPUT_REJECTED = "INPUT_REJECTED"
    FAILED = "FAILED"
    NO_CHANGE = "NO_CHANGE"
    CHANGED = "CHANGED"


@dataclass(slots=True, frozen=True)
class FileAddition:
    """File written or rewritten by the template tool."""

    path: str
    contents: bytes

    type = "addition"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "path": self.path,
            "contents": base64.b64encode(self.contents).decode("ascii"),
        }


@dataclass(slots=True, frozen=True)
class FileDeletion:
    """File removed by the template tool."""

    path: str

    type = "deletion"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "path": self.path}


@dataclass(slots=True, frozen=True)
class Notice:
    """Reviewer-facing message attached to a single file."""

    file: str
    message: str


@dataclass(slots=True, frozen=True)
class ArtifactError:
    """Failure reported against the answers file."""

    lock_file: str
    stderr: str


@dataclass(slots=True, frozen=True)
class UpdateArtifactsResult:
    """One entry of the result list: a file change or an artifact error."""

    file: FileAddition | FileDeletion | None = None
    notice: Notice | None = None
    artifact_error: ArtifactError | None = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if self.file is not None:
            payload["file"] = self.file.to_dict()
        if self.notice is not None:
            payload["notice"] = {"file": self.notice.file, "message": self.notice.message}
        if self.artifact_error is not None:
            payload["artifact_error"] = {
                "lock_file": self.artifact_error.lock_file,
                "stderr": self.artifact_error.stderr,
            }
        return payload


@dataclass(slots=True, frozen=True)
class ArtifactResult:
    """Outcome of an update together with its ordered result entries.

    ``NO_CHANGE`` carries no entries, ``CHANGED`` carries the change records and
    the two failure outcomes carry exactly one artifact error.
    """

    outcome: Outcome
    results: Tuple[UpdateArtifactsResult, ...] = ()

    @classmethod
    def no_change(cls) -> "ArtifactResult":
        return cls(Outcome.NO_CHANGE)

    @classmethod
    def changed(cls, results: List[UpdateArtifactsResult]) -> "ArtifactResult":
        return cls(Outcome.CHANGED, tuple(results))

    @property
    def ok(self) -> bool:
        return self.outcome in (Outcome.NO_CHANGE, Outcome.CHANGED)

    @property
    def error(self) -> ArtifactError | None:
        for entry in self.results:
            if entry.artifact_error is not None:
                return entry.artifact_error
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outcome": self.outcome.value,
            "results": [entry.to_dict() for entry in self.results],
        }


__all__ = [
    "ArtifactError",
    "ArtifactResult",
    "CONFLICT_NOTICE",
    "DependencyUpdate",
    "FileAddition",
    "FileDeletion",
    "Notice",
    "Outcome",
    "UpdateArtifactsResult",
    "UpdateRequest",
]
