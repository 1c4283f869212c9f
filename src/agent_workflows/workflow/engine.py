"""Step-graph workflow executor.

A workflow is an ordered set of named steps over a pydantic state model. The
executor runs one step at a time: each handler receives a private copy of
the current state and returns an update and/or a directive naming the next
step. Updates are merged key-wise; without a directive the run falls through
to the next registered step, and it completes after the last one or on `END`.
"""

from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .errors import (
    MaxStepsExceededError,
    OutputValidationError,
    PreconditionError,
    StateValidationError,
    StepExecutionError,
    UnknownStepError,
    WorkflowError,
)
from .registry import StepRegistry
from .steps import END, NEXT, PREV, SELF, START, StepHandler, coerce_step_result

logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 100

WorkflowEvent = Literal["start", "success", "error"]
_EVENTS: tuple[WorkflowEvent, ...] = ("start", "success", "error")


@dataclass(frozen=True, slots=True)
class RunView:
    """Read-only snapshot of a run handed to listeners."""

    run_id: str
    workflow: str
    step: str
    steps_taken: int
    visited: tuple[str, ...]
    state: BaseModel

    def state_json(self) -> str:
        return json.dumps(self.state.model_dump(), ensure_ascii=False, default=str)


Listener = Callable[[str, RunView], None]


@dataclass
class WorkflowRun:
    """One execution of a workflow. Discarded once the run ends."""

    workflow: str
    state: BaseModel
    run_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    step: str | None = None
    steps_taken: int = 0
    visited: list[str] = field(default_factory=list)

    def view(self) -> RunView:
        return RunView(
            run_id=self.run_id,
            workflow=self.workflow,
            step=self.step or "",
            steps_taken=self.steps_taken,
            visited=tuple(self.visited),
            state=self.state.model_copy(deep=True),
        )

    def log_extra(self) -> dict[str, object]:
        return {
            "workflow": self.workflow,
            "run_id": self.run_id,
            "step": self.step,
            "steps_taken": self.steps_taken,
        }


@dataclass(frozen=True, slots=True)
class WorkflowRunResult:
    result: BaseModel
    """Final state validated against the output schema."""

    state: BaseModel
    steps: tuple[str, ...]
    run_id: str


class Workflow:
    """A named-step state machine over a pydantic schema.

    Example:
        workflow = (
            Workflow(State, Output)
            .add_step("a", lambda state: {"x": 1})
            .add_strict_step("b", ["x"], lambda state: StepResult.finish(y=state.x))
        )
        workflow.run({"input": "hi"}).result
    """

    def __init__(
        self,
        schema: type[BaseModel],
        output_schema: type[BaseModel] | None = None,
        *,
        name: str | None = None,
        max_steps: int = DEFAULT_MAX_STEPS,
    ) -> None:
        if max_steps <= 0:
            raise ValueError("max_steps must be a positive integer")

        self.schema = schema
        self.output_schema = output_schema or schema
        self.name = name or schema.__name__
        self.max_steps = max_steps
        self._registry = StepRegistry(schema)
        self._listeners: dict[WorkflowEvent, list[Listener]] = {e: [] for e in _EVENTS}

    @property
    def steps(self) -> list[str]:
        return self._registry.names()

    def add_step(self, name: str, handler: StepHandler) -> Workflow:
        self._registry.register(name, handler)
        return self

    def add_strict_step(self, name: str, requires: Sequence[str], handler: StepHandler) -> Workflow:
        """Register a step that refuses to run unless `requires` fields are set."""

        self._registry.register(name, handler, requires=requires)
        return self

    def observe(self, listener: Listener) -> Workflow:
        """Call `listener(step_name, run_view)` at the start of every step."""

        return self.on("start", listener)

    def on(self, event: WorkflowEvent, listener: Listener) -> Workflow:
        if event not in self._listeners:
            raise ValueError(f"Unknown workflow event: {event}")
        self._listeners[event].append(listener)
        return self

    def run(
        self,
        initial_state: BaseModel | Mapping[str, Any],
        *,
        start: str | None = None,
        max_steps: int | None = None,
        observers: Iterable[Listener] = (),
    ) -> WorkflowRunResult:
        """Execute the workflow until a terminal directive.

        `observers` are per-run start listeners in addition to those registered
        with `observe`.
        """

        limit = max_steps if max_steps is not None else self.max_steps
        run = WorkflowRun(workflow=self.name, state=self._validate_input(initial_state))
        run_observers = list(observers)

        current: str | None = self._resolve_start(start, run)
        previous: str | None = None

        logger.info("Workflow run started", extra=run.log_extra())

        while current is not None:
            if run.steps_taken >= limit:
                raise MaxStepsExceededError(
                    f"Workflow '{self.name}' exceeded {limit} steps",
                    max_steps=limit,
                    step=current,
                    state=dict(run.state),
                )

            definition = self._registry.get(current)
            run.step = current
            run.steps_taken += 1
            run.visited.append(current)

            try:
                missing = definition.missing_fields(run.state)
                if missing:
                    raise PreconditionError(
                        f"Step '{current}' requires missing fields: {', '.join(missing)}",
                        missing=missing,
                        step=current,
                        state=dict(run.state),
                    )

                self._emit("start", run, run_observers)
                logger.debug("Workflow step started", extra=run.log_extra())

                try:
                    outcome = coerce_step_result(definition.handler(run.state.model_copy(deep=True)))
                except WorkflowError:
                    raise
                except Exception as e:
                    raise StepExecutionError(
                        f"Step '{current}' failed: {e}",
                        step=current,
                        state=dict(run.state),
                    ) from e

                if outcome.update:
                    run.state = self._merge(run.state, outcome.update, step=current)

                self._emit("success", run)
                next_step = self._resolve_next(outcome.next, current, previous, run)
            except WorkflowError:
                self._emit("error", run)
                logger.warning("Workflow run failed", extra=run.log_extra())
                raise

            previous = current
            current = next_step

        result = self._validate_output(run)
        logger.info("Workflow run finished", extra=run.log_extra())
        return WorkflowRunResult(
            result=result,
            state=run.state,
            steps=tuple(run.visited),
            run_id=run.run_id,
        )

    def _validate_input(self, initial_state: BaseModel | Mapping[str, Any]) -> BaseModel:
        try:
            if isinstance(initial_state, self.schema):
                return initial_state.model_copy(deep=True)
            if isinstance(initial_state, BaseModel):
                return self.schema.model_validate(dict(initial_state))
            return self.schema.model_validate(initial_state)
        except PydanticValidationError as e:
            raise StateValidationError(
                f"Initial state does not match {self.schema.__name__}: {e}",
                errors=e.errors(include_url=False),
            ) from e

    def _validate_output(self, run: WorkflowRun) -> BaseModel:
        try:
            return self.output_schema.model_validate(dict(run.state))
        except PydanticValidationError as e:
            raise OutputValidationError(
                f"Final state does not match {self.output_schema.__name__}: {e}",
                errors=e.errors(include_url=False),
                step=run.step,
                state=dict(run.state),
            ) from e

    def _merge(self, state: BaseModel, update: Mapping[str, Any], *, step: str) -> BaseModel:
        unknown = [key for key in update if key not in self.schema.model_fields]
        if unknown:
            raise StateValidationError(
                f"Step '{step}' updated undeclared fields: {', '.join(unknown)}",
                step=step,
                state=dict(state),
            )
        return state.model_copy(update=dict(update))

    def _resolve_start(self, start: str | None, run: WorkflowRun) -> str:
        first = self._registry.first()
        if first is None:
            raise UnknownStepError(f"Workflow '{self.name}' has no steps", state=dict(run.state))
        if start is None or start == START:
            return first
        if start not in self._registry:
            raise UnknownStepError(
                f"Start step '{start}' is not registered", step=start, state=dict(run.state)
            )
        return start

    def _resolve_next(
        self,
        directive: str | None,
        current: str,
        previous: str | None,
        run: WorkflowRun,
    ) -> str | None:
        """Turn a directive into the next step name, or None to finish."""

        if directive is None or directive == NEXT:
            return self._registry.after(current)
        if directive == END:
            return None
        if directive == START:
            return self._registry.first()
        if directive == SELF:
            return current
        if directive == PREV:
            return previous
        if directive not in self._registry:
            raise UnknownStepError(
                f"Step '{current}' routed to unknown step '{directive}'",
                step=current,
                state=dict(run.state),
            )
        return directive

    def _emit(
        self,
        event: WorkflowEvent,
        run: WorkflowRun,
        extra_listeners: Sequence[Listener] = (),
    ) -> None:
        listeners = [*self._listeners[event], *extra_listeners]
        if not listeners:
            return
        view = run.view()
        for listener in listeners:
            try:
                listener(view.step, view)
            except Exception:
                logger.exception(
                    "Workflow listener failed", extra={**run.log_extra(), "event": event}
                )
