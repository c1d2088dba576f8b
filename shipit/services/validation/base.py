"""Base types for validation steps."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path

from shipit.core.config import ReleaseConfig
from shipit.core.errors import ValidationStepFailure
from shipit.core.version import Version
from shipit.git.repository import Repository


class StepStatus(Enum):
    """Outcome of a single validation step."""

    PASSED = auto()
    """Step was enabled and its check succeeded."""

    FAILED = auto()
    """Step was enabled and its check failed; later steps do not run."""

    SKIPPED = auto()
    """Step is disabled by configuration. Never counts as passed."""


@dataclass(frozen=True, slots=True)
class StepResult:
    """Result of a single validation step.

    Attributes:
        name: Step identifier (e.g., "tests", "docs")
        status: Whether the step passed, failed or was skipped
        message: Human-readable result message
        hint: Optional fix suggestion for failures
    """

    name: str
    status: StepStatus
    message: str
    hint: str | None = None

    @property
    def passed(self) -> bool:
        return self.status == StepStatus.PASSED

    @property
    def failed(self) -> bool:
        return self.status == StepStatus.FAILED

    @property
    def skipped(self) -> bool:
        return self.status == StepStatus.SKIPPED

    @classmethod
    def ok(cls, name: str, message: str) -> StepResult:
        return cls(name=name, status=StepStatus.PASSED, message=message)

    @classmethod
    def fail(cls, name: str, message: str, hint: str | None = None) -> StepResult:
        return cls(name=name, status=StepStatus.FAILED, message=message, hint=hint)

    @classmethod
    def skip(cls, name: str, message: str) -> StepResult:
        return cls(name=name, status=StepStatus.SKIPPED, message=message)

    def to_failure(self) -> ValidationStepFailure:
        return ValidationStepFailure(step=self.name, message=self.message, hint=self.hint)


@dataclass(frozen=True, slots=True)
class ValidationContext:
    """Read-only inputs shared by every step.

    ``current`` is the version extracted from the project; ``target`` is the
    version about to be tagged.
    """

    config: ReleaseConfig
    root: Path
    repo: Repository
    current: Version
    target: Version

    @property
    def target_tag(self) -> str:
        return self.target.to_tag(self.config.tag_prefix)


@dataclass(frozen=True, slots=True)
class ValidationStep:
    """A named check gated by configuration.

    Attributes:
        name: Step identifier
        enabled: Predicate over the configuration
        check: Runs the check; only called when enabled
        disabled_reason: Shown when the step is skipped
    """

    name: str
    enabled: Callable[[ReleaseConfig], bool]
    check: Callable[[ValidationContext], StepResult]
    disabled_reason: str = "not configured"


@dataclass(frozen=True, slots=True)
class ValidationReport:
    """Results in step order, up to and including the first failure."""

    results: tuple[StepResult, ...]
    not_run: tuple[str, ...] = ()

    @property
    def failure(self) -> StepResult | None:
        for r in self.results:
            if r.failed:
                return r
        return None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def passed(self) -> list[str]:
        return [r.name for r in self.results if r.passed]

    @property
    def skipped(self) -> list[str]:
        return [r.name for r in self.results if r.skipped]
