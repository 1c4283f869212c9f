"""Builds the configured LLM provider."""

import logging
from collections.abc import Callable

from agent_workflows.core.config import LLMConfig
from agent_workflows.llm.llama_provider import LLaMAProvider
from agent_workflows.llm.openai_provider import OpenAIProvider
from agent_workflows.llm.provider import LLMProvider

logger = logging.getLogger(__name__)

_PROVIDERS: dict[str, Callable[[LLMConfig], LLMProvider]] = {
    "openai": OpenAIProvider,
    "llama": LLaMAProvider,
}


class LLMFactory:
    @staticmethod
    def create(config: LLMConfig) -> LLMProvider:
        """Create the provider named by `config.provider`.

        Raises:
            ValueError: If the provider is unknown or misconfigured.
            ImportError: If the provider's optional dependency is missing.
        """
        logger.info("Creating LLM provider", extra={"provider": config.provider})

        builder = _PROVIDERS.get(config.provider)
        if builder is None:
            raise ValueError(f"Unsupported LLM provider: {config.provider}")
        return builder(config)
