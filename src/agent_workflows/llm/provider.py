"""Abstract base class for LLM providers."""

from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```\s*$", re.MULTILINE)


class StructuredOutputError(ValueError):
    """The model did not produce valid JSON for the requested schema."""

    def __init__(self, message: str, *, attempts: int, last_output: str) -> None:
        super().__init__(message)
        self.attempts = attempts
        self.last_output = last_output


def extract_json_object(content: str) -> Any:
    """Parse the first JSON object in a model response.

    Tolerates markdown code fences and prose around the object.
    """

    try:
        return json.loads(content)
    except json.JSONDecodeError:
        pass

    cleaned = _FENCE_RE.sub("", content.strip())
    start = cleaned.find("{")
    if start < 0:
        raise ValueError("No JSON object found in response")

    decoder = json.JSONDecoder()
    obj, _end = decoder.raw_decode(cleaned[start:])
    return obj


def json_instruction(response_model: type[BaseModel]) -> str:
    schema = json.dumps(response_model.model_json_schema(), ensure_ascii=False)
    return (
        "\n\nYou must respond with ONLY valid JSON matching this JSON schema. "
        "No markdown, no explanations, just raw JSON:\n"
        f"{schema}"
    )


class LLMProvider(ABC):
    """Abstract base class for LLM providers.

    This interface allows pluggable LLM backends (OpenAI, LLaMA, etc.)
    """

    @abstractmethod
    def generate(
        self,
        prompt: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
        **kwargs: Any,
    ) -> str:
        """Generate text completion from a prompt.

        Args:
            prompt: The input prompt.
            max_tokens: Maximum tokens to generate.
            temperature: Sampling temperature.
            **kwargs: Additional provider-specific parameters.

        Returns:
            Generated text completion.
        """
        pass

    @abstractmethod
    def chat(
        self,
        messages: list[dict[str, str]],
        max_tokens: int | None = None,
        temperature: float | None = None,
        **kwargs: Any,
    ) -> str:
        """Generate chat completion from messages.

        Args:
            messages: List of message dicts with 'role' and 'content'.
            max_tokens: Maximum tokens to generate.
            temperature: Sampling temperature.
            **kwargs: Additional provider-specific parameters.

        Returns:
            Generated chat response.
        """
        pass

    @abstractmethod
    def count_tokens(self, text: str) -> int:
        """Count the number of tokens in text.

        Args:
            text: Text to count tokens for.

        Returns:
            Number of tokens.
        """
        pass

    def generate_structured(
        self,
        response_model: type[ModelT],
        messages: list[dict[str, str]],
        max_retries: int = 3,
        **kwargs: Any,
    ) -> ModelT:
        """Generate a chat completion parsed into `response_model`.

        The JSON schema of `response_model` is appended to the last message.
        When the reply cannot be parsed or validated, the error is sent back to
        the model and the request is retried.

        Args:
            response_model: Pydantic model describing the expected object.
            messages: List of message dicts with 'role' and 'content'.
            max_retries: Total attempts before giving up.
            **kwargs: Passed through to `chat`.

        Returns:
            The validated model instance.

        Raises:
            StructuredOutputError: If no attempt produced a valid object.
        """
        if not messages:
            raise ValueError("At least one message is required")

        conversation = [dict(m) for m in messages]
        conversation[-1]["content"] = conversation[-1]["content"] + json_instruction(
            response_model
        )

        content = ""
        for attempt in range(1, max_retries + 1):
            content = self.chat(conversation, **kwargs)
            try:
                return response_model.model_validate(extract_json_object(content))
            except (ValueError, ValidationError) as e:
                logger.debug(
                    "Structured output rejected",
                    extra={
                        "attempt": attempt,
                        "response_model": response_model.__name__,
                        "error": str(e),
                    },
                )
                conversation = [
                    *conversation,
                    {"role": "assistant", "content": content},
                    {
                        "role": "user",
                        "content": (
                            f"Your previous answer was invalid: {e}\n"
                            "Reply again with ONLY the corrected JSON object."
                        ),
                    },
                ]

        raise StructuredOutputError(
            f"Failed to produce a valid {response_model.__name__} after {max_retries} attempts",
            attempts=max_retries,
            last_output=content,
        )
