from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel

START = "__start__"
"""Directive: jump to the first registered step."""

SELF = "__self__"
"""Directive: run the current step again."""

PREV = "__prev__"
"""Directive: go back to the previously executed step (END if there is none)."""

NEXT = "__next__"
"""Directive: continue with the next step in registration order (END if last)."""

END = "__end__"
"""Terminal marker: the run is complete."""

RESERVED_STEP_NAMES: frozenset[str] = frozenset({START, SELF, PREV, NEXT, END})

StepKind = Literal["none", "update", "next", "update_and_next"]


@dataclass(frozen=True, slots=True)
class StepResult:
    """What a step hands back to the executor.

    `update` is merged key-wise into the state. `next` names the step to run
    next (or a reserved directive); when omitted the run falls through to the
    next registered step.
    """

    update: Mapping[str, Any] | None = None
    next: str | None = None

    @property
    def kind(self) -> StepKind:
        if self.update is not None and self.next is not None:
            return "update_and_next"
        if self.update is not None:
            return "update"
        if self.next is not None:
            return "next"
        return "none"

    @classmethod
    def updating(cls, **update: Any) -> StepResult:
        return cls(update=update)

    @classmethod
    def goto(cls, step: str, **update: Any) -> StepResult:
        return cls(update=update or None, next=step)

    @classmethod
    def finish(cls, **update: Any) -> StepResult:
        return cls(update=update or None, next=END)


StepHandler = Callable[[Any], "StepResult | Mapping[str, Any] | None"]


@dataclass(frozen=True, slots=True)
class StepDefinition:
    name: str
    handler: StepHandler
    requires: tuple[str, ...] = field(default_factory=tuple)

    def missing_fields(self, state: BaseModel) -> list[str]:
        """Required fields that are absent (None) in `state`."""

        return [name for name in self.requires if getattr(state, name, None) is None]


def coerce_step_result(value: object) -> StepResult:
    """Normalise a handler's return value.

    Handlers may return a StepResult, a plain mapping (an update with
    fallthrough), or None (no update, fallthrough).
    """

    if value is None:
        return StepResult()
    if isinstance(value, StepResult):
        return value
    if isinstance(value, Mapping):
        return StepResult(update=dict(value))
    raise TypeError(
        f"Step handlers must return StepResult, a mapping or None, got {type(value).__name__}"
    )
