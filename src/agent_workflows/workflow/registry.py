"""Ordered registry of workflow steps."""

from __future__ import annotations

from collections.abc import Iterator, Sequence

from pydantic import BaseModel

from .errors import DuplicateStepError, UnknownStepError
from .steps import RESERVED_STEP_NAMES, StepDefinition, StepHandler


class StepRegistry:
    """Named steps in insertion order.

    Insertion order is what implicit fallthrough follows when a handler does not
    return an explicit `next`.
    """

    def __init__(self, schema: type[BaseModel] | None = None) -> None:
        self._schema = schema
        self._steps: dict[str, StepDefinition] = {}

    def register(
        self,
        name: str,
        handler: StepHandler,
        requires: Sequence[str] = (),
    ) -> StepDefinition:
        if not name or not name.strip():
            raise ValueError("Step name must be a non-empty string")
        if name in RESERVED_STEP_NAMES:
            raise DuplicateStepError(f"Step name '{name}' is reserved", step=name)
        if name in self._steps:
            raise DuplicateStepError(f"Step '{name}' is already registered", step=name)
        if not callable(handler):
            raise TypeError(f"Handler for step '{name}' is not callable")

        if self._schema is not None:
            unknown = [f for f in requires if f not in self._schema.model_fields]
            if unknown:
                raise ValueError(
                    f"Step '{name}' requires fields not declared by "
                    f"{self._schema.__name__}: {', '.join(unknown)}"
                )

        definition = StepDefinition(name=name, handler=handler, requires=tuple(requires))
        self._steps[name] = definition
        return definition

    def get(self, name: str) -> StepDefinition:
        try:
            return self._steps[name]
        except KeyError:
            raise UnknownStepError(f"Step '{name}' is not registered", step=name) from None

    def first(self) -> str | None:
        return next(iter(self._steps), None)

    def after(self, name: str) -> str | None:
        """Name of the step registered right after `name`, or None if it is last."""

        names = list(self._steps)
        idx = names.index(self.get(name).name)
        return names[idx + 1] if idx + 1 < len(names) else None

    def names(self) -> list[str]:
        return list(self._steps)

    def __contains__(self, name: object) -> bool:
        return name in self._steps

    def __iter__(self) -> Iterator[StepDefinition]:
        return iter(self._steps.values())

    def __len__(self) -> int:
        return len(self._steps)
