"""Exit codes and error payloads for the release pipeline.

Every stage of the pipeline reports failure as one of the frozen dataclasses
below, wrapped in ``Err``. ``ErrorCode`` maps them to stable process exit
codes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Literal

__all__ = [
    "ErrorCode",
    "ConfigurationError",
    "ExtractionError",
    "ValidationStepFailure",
    "VersionOrderError",
    "TagError",
    "PushError",
    "UsageError",
    "PipelineError",
]


class ErrorCode(IntEnum):
    """Exit codes for the shipit command.

    These values are used as process exit codes and should remain stable.
    """

    OK = 0
    USER_ERROR = 1
    CONFIG_ERROR = 2
    EXTRACTION_ERROR = 3
    VALIDATION_ERROR = 4
    TAG_ERROR = 5
    PUSH_ERROR = 6

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK


@dataclass(frozen=True, slots=True)
class ConfigurationError:
    """Unknown strategy, missing required option or unreadable config file."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ExtractionError:
    """Version file missing or unreadable, or no unambiguous version in it."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ValidationStepFailure:
    step: str
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class VersionOrderError:
    current: str
    requested: str

    @property
    def message(self) -> str:
        return f"requested version {self.requested} is not greater than current {self.current}"


@dataclass(frozen=True, slots=True)
class TagError:
    kind: Literal["tag_exists", "declined", "tag_failed"]
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class PushError:
    """Tag exists locally but could not be pushed."""

    tag: str
    remote: str
    message: str

    @property
    def hint(self) -> str:
        return (
            f"tag {self.tag} exists locally but not on {self.remote}; "
            "re-run to retry the push, or delete it with: "
            f"git tag -d {self.tag}"
        )


@dataclass(frozen=True, slots=True)
class UsageError:
    message: str


PipelineError = (
    ConfigurationError
    | ExtractionError
    | ValidationStepFailure
    | VersionOrderError
    | TagError
    | PushError
    | UsageError
)
