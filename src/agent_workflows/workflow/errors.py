"""Workflow error taxonomy.

Every error aborts the current run and carries the step name (when known) and
the state at the time of failure so callers can display or retry.
"""

from __future__ import annotations

import traceback
from typing import Any


class WorkflowError(Exception):
    """Base class for all workflow errors."""

    def __init__(
        self,
        message: str,
        *,
        step: str | None = None,
        state: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.step = step
        self.state = state

    def dump(self) -> str:
        """Render the error and its cause chain for console display."""

        lines = [f"{type(self).__name__}: {self.message}"]
        if self.step is not None:
            lines.append(f"  step: {self.step}")
        cause = self.__cause__
        while cause is not None:
            lines.append(f"  caused by {type(cause).__name__}: {cause}")
            cause = cause.__cause__
        return "\n".join(lines)


class StateValidationError(WorkflowError):
    """State does not satisfy the workflow schema."""

    def __init__(
        self,
        message: str,
        *,
        errors: list[dict[str, Any]] | None = None,
        step: str | None = None,
        state: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, step=step, state=state)
        self.errors = errors or []


class OutputValidationError(StateValidationError):
    """Final state does not satisfy the output schema."""


class DuplicateStepError(WorkflowError):
    pass


class UnknownStepError(WorkflowError):
    pass


class PreconditionError(WorkflowError):
    """A strict step ran without one of its required fields."""

    def __init__(
        self,
        message: str,
        *,
        missing: list[str],
        step: str | None = None,
        state: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, step=step, state=state)
        self.missing = missing


class StepExecutionError(WorkflowError):
    """A step handler raised; the original exception is the `__cause__`."""


class MaxStepsExceededError(WorkflowError):
    def __init__(
        self,
        message: str,
        *,
        max_steps: int,
        step: str | None = None,
        state: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, step=step, state=state)
        self.max_steps = max_steps


class _UnexpectedError(WorkflowError):
    def dump(self) -> str:
        cause = self.__cause__
        if cause is None:
            return super().dump()
        return "".join(traceback.format_exception_only(type(cause), cause)).rstrip()


def ensure_workflow_error(exc: BaseException) -> WorkflowError:
    """Return `exc` as a WorkflowError, wrapping foreign exceptions."""

    if isinstance(exc, WorkflowError):
        return exc
    wrapped = _UnexpectedError(str(exc) or type(exc).__name__)
    wrapped.__cause__ = exc
    return wrapped
