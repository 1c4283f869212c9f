"""OpenAI chat completions backend."""

import logging
import time
from typing import Any, TypeVar

from openai import OpenAI
from pydantic import BaseModel

from agent_workflows.core.config import LLMConfig
from agent_workflows.llm.provider import LLMProvider

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class OpenAIProvider(LLMProvider):
    """Talks to OpenAI, or any server exposing the same chat completions API
    (set `openai_base_url`).
    """

    def __init__(self, config: LLMConfig, client: OpenAI | None = None) -> None:
        """
        Args:
            config: LLM configuration.
            client: Pre-built client; skips the API key check.

        Raises:
            ValueError: If no API key is configured and no client is given.
        """
        if client is None and not config.openai_api_key:
            raise ValueError("OpenAI API key is required (AGENT_WORKFLOWS_LLM_OPENAI_API_KEY)")

        self.config = config
        self.model = config.openai_model
        self.temperature = config.openai_temperature
        self.client = client or OpenAI(
            api_key=config.openai_api_key,
            base_url=config.openai_base_url,
        )

        logger.info(
            "OpenAI provider initialized",
            extra={"model": self.model, "base_url": config.openai_base_url},
        )

    def generate(
        self,
        prompt: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
        **kwargs: Any,
    ) -> str:
        return self.chat(
            [{"role": "user", "content": prompt}],
            max_tokens=max_tokens,
            temperature=temperature,
            **kwargs,
        )

    def chat(
        self,
        messages: list[dict[str, str]],
        max_tokens: int | None = None,
        temperature: float | None = None,
        **kwargs: Any,
    ) -> str:
        started = time.monotonic()
        response = self.client.chat.completions.create(
            model=self.model,
            messages=messages,  # type: ignore[arg-type]
            max_tokens=max_tokens,
            temperature=self.temperature if temperature is None else temperature,
            **kwargs,
        )
        content = response.choices[0].message.content or ""

        logger.debug(
            "Chat completion received",
            extra={
                "model": self.model,
                "messages": len(messages),
                "chars": len(content),
                "elapsed_ms": int((time.monotonic() - started) * 1000),
            },
        )
        return content

    def generate_structured(
        self,
        response_model: type[ModelT],
        messages: list[dict[str, str]],
        max_retries: int = 3,
        **kwargs: Any,
    ) -> ModelT:
        """Same as the base implementation, with the API's JSON mode switched on."""

        kwargs.setdefault("response_format", {"type": "json_object"})
        return super().generate_structured(response_model, messages, max_retries, **kwargs)

    def count_tokens(self, text: str) -> int:
        # ~4 characters per token; only used for memory budgeting.
        return (len(text) + 3) // 4
