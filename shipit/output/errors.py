"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from shipit.core.errors import (
    ConfigurationError,
    ErrorCode,
    ExtractionError,
    PipelineError,
    PushError,
    TagError,
    UsageError,
    ValidationStepFailure,
    VersionOrderError,
)
from shipit.output.console import Style

if TYPE_CHECKING:
    from shipit.output.console import ConsoleProtocol

__all__ = ["USAGE", "print_pipeline_error", "pipeline_error_exit_code"]

USAGE = "usage: shipit [major|minor|patch|X.Y.Z] [major|minor|patch|X.Y.Z]"


def print_pipeline_error(error: PipelineError, stage: str, console: ConsoleProtocol) -> None:
    """Print a pipeline failure, naming the stage it happened in."""
    match error:
        case UsageError(message=message):
            console.error(f"{stage}: {message}")
            console.print(USAGE, Style.DIM)
        case ConfigurationError(message=message, path=path):
            where = f" ({path})" if path is not None else ""
            console.error(f"{stage}: {message}{where}")
        case ExtractionError(message=message, path=path):
            where = f" ({path})" if path is not None else ""
            console.error(f"{stage}: {message}{where}")
        case ValidationStepFailure(step=step):
            # The runner already printed the step message and hint.
            console.error(f"{stage}: {step} failed")
        case VersionOrderError():
            console.error(f"{stage}: {error.message}")
        case TagError(message=message, hint=hint):
            console.error(f"{stage}: {message}")
            if hint:
                console.print(f"hint: {hint}", Style.DIM)
        case PushError(message=message):
            console.error(f"{stage}: {message}")
            console.print(f"hint: {error.hint}", Style.DIM)


def pipeline_error_exit_code(error: PipelineError) -> int:
    """Get the process exit code for a pipeline failure."""
    match error:
        case UsageError() | VersionOrderError():
            return int(ErrorCode.USER_ERROR)
        case ConfigurationError():
            return int(ErrorCode.CONFIG_ERROR)
        case ExtractionError():
            return int(ErrorCode.EXTRACTION_ERROR)
        case ValidationStepFailure():
            return int(ErrorCode.VALIDATION_ERROR)
        case TagError(kind="declined"):
            return int(ErrorCode.USER_ERROR)
        case TagError():
            return int(ErrorCode.TAG_ERROR)
        case PushError():
            return int(ErrorCode.PUSH_ERROR)
    return int(ErrorCode.USER_ERROR)
