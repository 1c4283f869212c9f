"""Schema-checked prompt templates rendered with Jinja2."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from jinja2 import Environment, StrictUndefined, TemplateError
from pydantic import BaseModel, ValidationError

SchemaT = TypeVar("SchemaT", bound=BaseModel)

_env = Environment(
    undefined=StrictUndefined,
    keep_trailing_newline=True,
    trim_blocks=True,
    lstrip_blocks=True,
    autoescape=False,
)


class PromptTemplateError(ValueError):
    pass


class PromptTemplate(Generic[SchemaT]):
    """A prompt whose variables are validated before rendering.

    Values are validated against `schema` and then exposed to the template as
    the validated model's attributes, so nested models keep attribute access.
    """

    def __init__(self, *, schema: type[SchemaT], template: str) -> None:
        self.schema = schema
        self.source = template
        try:
            self._template = _env.from_string(template)
        except TemplateError as e:
            raise PromptTemplateError(f"Invalid template: {e}") from e

    def render(self, **values: Any) -> str:
        try:
            data = self.schema.model_validate(values)
        except ValidationError as e:
            raise PromptTemplateError(
                f"Invalid values for {self.schema.__name__}: {e}"
            ) from e

        context = {name: getattr(data, name) for name in self.schema.model_fields}
        try:
            return self._template.render(**context)
        except TemplateError as e:
            raise PromptTemplateError(f"Template rendering error: {e}") from e
