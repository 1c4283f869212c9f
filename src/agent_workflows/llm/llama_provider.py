"""Local models through llama-cpp-python."""

import logging
from typing import Any, TypeVar

from pydantic import BaseModel

from agent_workflows.core.config import LLMConfig
from agent_workflows.llm.provider import LLMProvider

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

DEFAULT_MAX_TOKENS = 512


class LLaMAProvider(LLMProvider):
    """Runs a GGUF model in-process.

    Requires the optional `llama` extra:
        pip install agent-workflows[llama]
    """

    def __init__(self, config: LLMConfig) -> None:
        """
        Raises:
            ValueError: If model path is not provided.
            ImportError: If llama-cpp-python is not installed.
        """
        if not config.llama_model_path:
            raise ValueError("LLaMA model path is required (AGENT_WORKFLOWS_LLM_LLAMA_MODEL_PATH)")

        try:
            from llama_cpp import Llama
        except ImportError as e:
            raise ImportError(
                "llama-cpp-python is required for the LLaMA provider. "
                "Install it with: pip install agent-workflows[llama]"
            ) from e

        self.config = config
        self.temperature = config.openai_temperature

        logger.info("Loading LLaMA model", extra={"model_path": str(config.llama_model_path)})
        self.llm = Llama(
            model_path=str(config.llama_model_path),
            n_ctx=config.llama_n_ctx,
            n_threads=config.llama_n_threads,
            verbose=False,
        )

    def _sampling(self, max_tokens: int | None, temperature: float | None) -> dict[str, Any]:
        return {
            "max_tokens": max_tokens or DEFAULT_MAX_TOKENS,
            "temperature": self.temperature if temperature is None else temperature,
        }

    def generate(
        self,
        prompt: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
        **kwargs: Any,
    ) -> str:
        result = self.llm(prompt, **self._sampling(max_tokens, temperature), **kwargs)
        return result["choices"][0]["text"]

    def chat(
        self,
        messages: list[dict[str, str]],
        max_tokens: int | None = None,
        temperature: float | None = None,
        **kwargs: Any,
    ) -> str:
        logger.debug("Local chat completion", extra={"messages": len(messages)})
        result = self.llm.create_chat_completion(
            messages=messages,
            **self._sampling(max_tokens, temperature),
            **kwargs,
        )
        return result["choices"][0]["message"]["content"] or ""

    def generate_structured(
        self,
        response_model: type[ModelT],
        messages: list[dict[str, str]],
        max_retries: int = 3,
        **kwargs: Any,
    ) -> ModelT:
        # Grammar-constrained JSON output.
        kwargs.setdefault("response_format", {"type": "json_object"})
        return super().generate_structured(response_model, messages, max_retries, **kwargs)

    def count_tokens(self, text: str) -> int:
        return len(self.llm.tokenize(text.encode("utf-8")))
