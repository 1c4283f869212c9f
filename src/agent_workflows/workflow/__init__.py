"""Step-graph workflow engine.

This package provides first-class types for:
- Steps and the directives they return (next step, fallthrough, termination)
- An ordered step registry
- A synchronous executor with start/success/error listeners

Control flow is deterministic given deterministic step handlers.
"""

from .engine import RunView, Workflow, WorkflowRun, WorkflowRunResult
from .errors import (
    DuplicateStepError,
    MaxStepsExceededError,
    OutputValidationError,
    PreconditionError,
    StateValidationError,
    StepExecutionError,
    UnknownStepError,
    WorkflowError,
    ensure_workflow_error,
)
from .registry import StepRegistry
from .steps import END, NEXT, PREV, SELF, START, StepDefinition, StepResult

__all__ = [
    "END",
    "NEXT",
    "PREV",
    "SELF",
    "START",
    "DuplicateStepError",
    "MaxStepsExceededError",
    "OutputValidationError",
    "PreconditionError",
    "RunView",
    "StateValidationError",
    "StepDefinition",
    "StepExecutionError",
    "StepRegistry",
    "StepResult",
    "UnknownStepError",
    "Workflow",
    "WorkflowError",
    "WorkflowRun",
    "WorkflowRunResult",
    "ensure_workflow_error",
]
