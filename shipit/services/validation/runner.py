from __future__ import annotations

from collections.abc import Sequence

from shipit.output.console import ConsoleProtocol, Style
from shipit.services.validation.base import (
    StepResult,
    ValidationContext,
    ValidationReport,
    ValidationStep,
)
from shipit.services.validation.steps import DEFAULT_STEPS


class ValidationRunner:
    """Run validation steps in order, stopping at the first failure.

    Disabled steps are reported as skipped. Steps after a failure are not
    run and appear in ``ValidationReport.not_run``.
    """

    def __init__(
        self,
        *,
        console: ConsoleProtocol,
        steps: Sequence[ValidationStep] = DEFAULT_STEPS,
    ) -> None:
        self._console = console
        self._steps = tuple(steps)

    def run(self, ctx: ValidationContext) -> ValidationReport:
        results: list[StepResult] = []

        for index, step in enumerate(self._steps):
            if not step.enabled(ctx.config):
                result = StepResult.skip(step.name, step.disabled_reason)
            else:
                self._console.print(f"running {step.name}...", Style.DIM)
                result = step.check(ctx)

            results.append(result)
            self._report(result)

            if result.failed:
                remaining = tuple(s.name for s in self._steps[index + 1 :])
                return ValidationReport(results=tuple(results), not_run=remaining)

        return ValidationReport(results=tuple(results))

    def _report(self, result: StepResult) -> None:
        if result.skipped:
            self._console.skipped(f"{result.name}: {result.message}")
        elif result.passed:
            self._console.success(f"{result.name}: {result.message}")
        else:
            self._console.error(f"{result.name}: {result.message}")
            if result.hint:
                self._console.print(f"hint: {result.hint}", Style.DIM)
