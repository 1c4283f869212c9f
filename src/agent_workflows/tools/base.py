from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, ClassVar

from pydantic import BaseModel, ValidationError


class ToolError(RuntimeError):
    """A tool could not produce a result (bad input, upstream failure)."""


@dataclass(frozen=True, slots=True)
class ToolOutput:
    text: str
    data: object | None = None


class Tool(ABC):
    """A named capability an agent can call with JSON input."""

    name: ClassVar[str]
    description: ClassVar[str]
    input_model: ClassVar[type[BaseModel]]

    def run(self, tool_input: Mapping[str, Any] | BaseModel) -> ToolOutput:
        try:
            if isinstance(tool_input, self.input_model):
                parsed = tool_input
            else:
                parsed = self.input_model.model_validate(dict(tool_input))
        except ValidationError as e:
            raise ToolError(f"Invalid input for tool '{self.name}': {e}") from e
        return self._run(parsed)

    @abstractmethod
    def _run(self, tool_input: Any) -> ToolOutput: ...

    def describe(self) -> str:
        """One-line description with the input schema, for agent prompts."""

        schema = json.dumps(self.input_model.model_json_schema(), ensure_ascii=False)
        return f"{self.name}: {self.description}\n  input schema: {schema}"
