from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TypeVar

from shipit.core.errors import PipelineError, UsageError
from shipit.core.result import Err, Ok, Result

S = TypeVar("S")


@dataclass(frozen=True, slots=True)
class StepAdvance[S]:
    state: S


@dataclass(frozen=True, slots=True)
class StepFinish[S]:
    state: S


@dataclass(frozen=True, slots=True)
class StageFailed:
    """Terminal failure: ``error`` happened while in ``stage``."""

    stage: str
    error: PipelineError


StepOutcome = StepAdvance[S] | StepFinish[S]
StepHandler = Callable[[S], Result[StepOutcome[S], PipelineError]]
GetStage = Callable[[S], str]


def advance[S](state: S) -> StepAdvance[S]:
    return StepAdvance(state=state)


def finish[S](state: S) -> StepFinish[S]:
    return StepFinish(state=state)


def run_state_machine(
    *,
    initial_state: S,
    get_stage: GetStage[S],
    handlers: Mapping[str, StepHandler[S]],
) -> Result[S, StageFailed]:
    """Drive ``initial_state`` through ``handlers`` until one finishes.

    The stage to run is read from the state itself, so handlers move the
    machine by returning a state whose stage is the next one.
    """
    current = initial_state

    while True:
        stage = get_stage(current)
        handler = handlers.get(stage)
        if handler is None:
            return Err(StageFailed(stage=stage, error=UsageError(f"unknown stage: {stage}")))

        outcome = handler(current)
        if isinstance(outcome, Err):
            return Err(StageFailed(stage=stage, error=outcome.error))

        if isinstance(outcome.value, StepFinish):
            return Ok(outcome.value.state)

        current = outcome.value.state
