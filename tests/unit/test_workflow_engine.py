"""Unit tests for the workflow executor.

These tests assert the control-flow guarantees: fallthrough order, explicit
routing, preconditions, validation at the boundaries and failure isolation.
"""

from __future__ import annotations

from unittest.mock import Mock

import pytest
from pydantic import BaseModel, Field

from agent_workflows.workflow import (
    END,
    NEXT,
    PREV,
    SELF,
    START,
    MaxStepsExceededError,
    OutputValidationError,
    PreconditionError,
    RunView,
    StateValidationError,
    StepExecutionError,
    StepResult,
    UnknownStepError,
    Workflow,
)


class State(BaseModel):
    input: str
    output: str | None = None
    topic: str | None = None
    notes: list[str] = Field(default_factory=list)
    trail: list[str] = Field(default_factory=list)


class Output(State):
    output: str


def _visit(name: str):
    def handler(state: State) -> dict[str, object]:
        return {"trail": [*state.trail, name]}

    return handler


def test_fallthrough_visits_steps_in_registration_order() -> None:
    workflow = (
        Workflow(State)
        .add_step("a", _visit("a"))
        .add_step("b", _visit("b"))
        .add_step("c", _visit("c"))
    )

    outcome = workflow.run({"input": "x"})

    assert outcome.steps == ("a", "b", "c")
    assert outcome.state.trail == ["a", "b", "c"]


def test_explicit_next_skips_intermediate_steps() -> None:
    workflow = (
        Workflow(State)
        .add_step("router", lambda _s: StepResult.goto("vision"))
        .add_step("language", _visit("language"))
        .add_step("timeseries", _visit("timeseries"))
        .add_step("vision", lambda s: StepResult.finish(trail=[*s.trail, "vision"]))
    )

    outcome = workflow.run({"input": "x"})

    assert outcome.steps == ("router", "vision")
    assert outcome.state.trail == ["vision"]


def test_end_directive_stops_run_with_update() -> None:
    second = Mock(return_value=None)
    workflow = (
        Workflow(State, Output)
        .add_step("first", lambda _s: StepResult.finish(output="done"))
        .add_step("second", second)
    )

    outcome = workflow.run({"input": "x"})

    assert outcome.result.output == "done"
    assert isinstance(outcome.result, Output)
    second.assert_not_called()


def test_strict_step_does_not_run_when_required_field_missing() -> None:
    handler = Mock(return_value={"output": "never"})
    workflow = Workflow(State).add_strict_step("planner", ["topic"], handler)

    with pytest.raises(PreconditionError) as exc_info:
        workflow.run({"input": "x"})

    handler.assert_not_called()
    assert exc_info.value.missing == ["topic"]
    assert exc_info.value.step == "planner"


def test_strict_step_runs_once_field_is_set_upstream() -> None:
    workflow = (
        Workflow(State, Output)
        .add_step("pre", lambda _s: {"topic": "bees"})
        .add_strict_step("planner", ["topic"], lambda s: {"output": f"plan for {s.topic}"})
    )

    assert workflow.run({"input": "x"}).result.output == "plan for bees"


def test_invalid_initial_state_is_rejected() -> None:
    handler = Mock(return_value=None)
    workflow = Workflow(State).add_step("a", handler)

    with pytest.raises(StateValidationError) as exc_info:
        workflow.run({"notes": "not-a-list"})

    assert exc_info.value.errors
    handler.assert_not_called()


def test_final_state_must_match_output_schema() -> None:
    workflow = Workflow(State, Output).add_step("a", lambda _s: {"topic": "t"})

    with pytest.raises(OutputValidationError):
        workflow.run({"input": "x"})


def test_update_with_undeclared_field_is_rejected() -> None:
    workflow = Workflow(State).add_step("a", lambda _s: {"unknown": 1})

    with pytest.raises(StateValidationError) as exc_info:
        workflow.run({"input": "x"})

    assert exc_info.value.step == "a"


def test_unknown_next_step_fails() -> None:
    workflow = Workflow(State).add_step("a", lambda _s: StepResult.goto("missing"))

    with pytest.raises(UnknownStepError):
        workflow.run({"input": "x"})


def test_unknown_start_step_fails() -> None:
    workflow = Workflow(State).add_step("a", _visit("a"))

    with pytest.raises(UnknownStepError):
        workflow.run({"input": "x"}, start="nope")


def test_start_step_can_be_chosen() -> None:
    workflow = Workflow(State).add_step("a", _visit("a")).add_step("b", _visit("b"))

    assert workflow.run({"input": "x"}, start="b").steps == ("b",)


def test_empty_workflow_cannot_run() -> None:
    with pytest.raises(UnknownStepError):
        Workflow(State).run({"input": "x"})


def test_handler_exception_is_wrapped_and_later_runs_are_unaffected() -> None:
    calls = {"n": 0}

    def flaky(state: State) -> dict[str, object]:
        calls["n"] += 1
        if calls["n"] == 1:
            raise RuntimeError("model unavailable")
        return {"output": state.input.upper()}

    workflow = Workflow(State, Output).add_step("a", _visit("a")).add_step("b", flaky)

    with pytest.raises(StepExecutionError) as exc_info:
        workflow.run({"input": "x"})

    assert exc_info.value.step == "b"
    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert exc_info.value.state is not None
    assert exc_info.value.state["trail"] == ["a"]

    outcome = workflow.run({"input": "x"})
    assert outcome.result.output == "X"
    assert workflow.steps == ["a", "b"]


def test_handler_returning_unsupported_type_fails() -> None:
    workflow = Workflow(State).add_step("a", lambda _s: 42)

    with pytest.raises(StepExecutionError) as exc_info:
        workflow.run({"input": "x"})

    assert isinstance(exc_info.value.__cause__, TypeError)


def test_routing_loop_is_capped() -> None:
    workflow = Workflow(State, max_steps=5).add_step("loop", lambda _s: StepResult.goto(SELF))

    with pytest.raises(MaxStepsExceededError) as exc_info:
        workflow.run({"input": "x"})

    assert exc_info.value.max_steps == 5


def test_per_run_step_cap_overrides_default() -> None:
    workflow = Workflow(State).add_step("loop", lambda _s: StepResult.goto("loop"))

    with pytest.raises(MaxStepsExceededError):
        workflow.run({"input": "x"}, max_steps=3)


def test_reserved_directives() -> None:
    def counter(state: State) -> StepResult:
        trail = [*state.trail, "count"]
        if len(trail) < 3:
            return StepResult.goto(SELF, trail=trail)
        return StepResult.goto(NEXT, trail=trail)

    def back_once(state: State) -> StepResult:
        if "back" in state.trail:
            return StepResult.goto(END)
        return StepResult.goto(PREV, trail=[*state.trail, "back"])

    workflow = Workflow(State).add_step("count", counter).add_step("back", back_once)

    outcome = workflow.run({"input": "x"})

    assert outcome.steps == ("count", "count", "count", "back", "count", "back")


def test_start_directive_restarts_from_first_step() -> None:
    def second(state: State) -> StepResult:
        if state.trail.count("first") < 2:
            return StepResult.goto(START)
        return StepResult.finish()

    workflow = Workflow(State).add_step("first", _visit("first")).add_step("second", second)

    assert workflow.run({"input": "x"}).steps == ("first", "second", "first", "second")


def test_replay_is_deterministic() -> None:
    workflow = (
        Workflow(State, Output)
        .add_step("a", lambda s: {"topic": s.input[::-1]})
        .add_step("b", lambda s: {"notes": [s.topic or ""]})
        .add_step("c", lambda s: StepResult.finish(output=f"{s.topic}:{len(s.notes)}"))
    )

    first = workflow.run({"input": "abc"})
    second = workflow.run({"input": "abc"})

    assert first.state == second.state
    assert first.result == second.result
    assert first.run_id != second.run_id


def test_handlers_cannot_mutate_state_in_place() -> None:
    def sneaky(state: State) -> None:
        state.notes.append("leaked")
        state.topic = "leaked"

    initial = State(input="x", notes=["kept"])
    workflow = Workflow(State).add_step("sneaky", sneaky)

    outcome = workflow.run(initial)

    assert outcome.state.notes == ["kept"]
    assert outcome.state.topic is None
    assert initial.notes == ["kept"]


def test_observers_see_each_step_start() -> None:
    seen: list[tuple[str, int, str | None]] = []

    def listener(step: str, run: RunView) -> None:
        seen.append((step, run.steps_taken, run.state.topic))

    workflow = (
        Workflow(State)
        .add_step("a", lambda _s: {"topic": "t"})
        .add_step("b", _visit("b"))
        .observe(listener)
    )

    workflow.run({"input": "x"})

    assert seen == [("a", 1, None), ("b", 2, "t")]


def test_per_run_observers_and_failing_listener_do_not_affect_run() -> None:
    per_run: list[str] = []

    def broken(_step: str, _run: RunView) -> None:
        raise RuntimeError("listener bug")

    def mutating(_step: str, run: RunView) -> None:
        run.state.topic = "mutated"

    workflow = Workflow(State).add_step("a", _visit("a")).observe(broken).observe(mutating)

    outcome = workflow.run({"input": "x"}, observers=[lambda step, _run: per_run.append(step)])

    assert per_run == ["a"]
    assert outcome.state.topic is None


def test_success_and_error_events() -> None:
    events: list[tuple[str, str]] = []

    def fail(_state: State) -> None:
        raise ValueError("boom")

    workflow = (
        Workflow(State)
        .add_step("ok", _visit("ok"))
        .add_step("bad", fail)
        .on("success", lambda step, _run: events.append(("success", step)))
        .on("error", lambda step, _run: events.append(("error", step)))
    )

    with pytest.raises(StepExecutionError):
        workflow.run({"input": "x"})

    assert events == [("success", "ok"), ("error", "bad")]


def test_unknown_event_name_is_rejected() -> None:
    with pytest.raises(ValueError):
        Workflow(State).on("finish", lambda _step, _run: None)  # type: ignore[arg-type]


def test_run_view_state_json() -> None:
    captured: list[str] = []
    workflow = Workflow(State).add_step("a", _visit("a"))

    workflow.run({"input": "héllo"}, observers=[lambda _s, run: captured.append(run.state_json())])

    assert '"input": "héllo"' in captured[0]
