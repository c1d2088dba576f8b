from __future__ import annotations

from dataclasses import dataclass, replace

from shipit.cli.fsm import StepOutcome, advance, finish, run_state_machine
from shipit.core.errors import ExtractionError, PipelineError, UsageError
from shipit.core.result import Err, Ok, Result


@dataclass(frozen=True, slots=True)
class _State:
    step: str
    counter: int


def test_run_state_machine_advances_until_finish() -> None:
    def step_a(s: _State) -> Result[StepOutcome[_State], PipelineError]:
        return Ok(advance(replace(s, step="b", counter=s.counter + 1)))

    def step_b(s: _State) -> Result[StepOutcome[_State], PipelineError]:
        return Ok(finish(replace(s, counter=s.counter + 10)))

    result = run_state_machine(
        initial_state=_State(step="a", counter=0),
        get_stage=lambda s: s.step,
        handlers={"a": step_a, "b": step_b},
    )

    assert result == Ok(_State(step="b", counter=11))


def test_run_state_machine_unknown_stage_fails() -> None:
    result = run_state_machine(
        initial_state=_State(step="missing", counter=0),
        get_stage=lambda s: s.step,
        handlers={},
    )

    assert isinstance(result, Err)
    assert result.error.stage == "missing"
    assert isinstance(result.error.error, UsageError)


def test_run_state_machine_stops_in_failing_stage() -> None:
    later: list[str] = []

    def step_a(s: _State) -> Result[StepOutcome[_State], PipelineError]:
        return Ok(advance(replace(s, step="b")))

    def bad_step(_: _State) -> Result[StepOutcome[_State], PipelineError]:
        return Err(ExtractionError("boom"))

    def step_c(s: _State) -> Result[StepOutcome[_State], PipelineError]:
        later.append("c")
        return Ok(finish(s))

    result = run_state_machine(
        initial_state=_State(step="a", counter=0),
        get_stage=lambda s: s.step,
        handlers={"a": step_a, "b": bad_step, "c": step_c},
    )

    assert isinstance(result, Err)
    assert result.error.stage == "b"
    assert result.error.error == ExtractionError("boom")
    assert later == []
