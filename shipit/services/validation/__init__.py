"""Release validation steps and the runner that executes them."""

from shipit.services.validation.base import (
    StepResult,
    StepStatus,
    ValidationContext,
    ValidationReport,
    ValidationStep,
)
from shipit.services.validation.runner import ValidationRunner
from shipit.services.validation.steps import DEFAULT_STEPS

__all__ = [
    "DEFAULT_STEPS",
    "StepResult",
    "StepStatus",
    "ValidationContext",
    "ValidationReport",
    "ValidationRunner",
    "ValidationStep",
]
