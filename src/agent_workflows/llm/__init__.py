"""LLM package initialization."""

from agent_workflows.llm.factory import LLMFactory
from agent_workflows.llm.provider import LLMProvider, StructuredOutputError

__all__ = [
    "LLMFactory",
    "LLMProvider",
    "StructuredOutputError",
]
