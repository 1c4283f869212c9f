"""Test configuration and fixtures."""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from agent_workflows.core.config import AgentConfig, AppConfig, LLMConfig, WorkflowConfig
from agent_workflows.llm.provider import LLMProvider


class ScriptedLLM(LLMProvider):
    """Replays canned chat responses in order and records every request."""

    def __init__(self, responses: list[str] | None = None) -> None:
        self.responses = list(responses or [])
        self.calls: list[list[dict[str, str]]] = []

    def generate(
        self,
        prompt: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
        **kwargs: Any,
    ) -> str:
        return self.chat([{"role": "user", "content": prompt}])

    def chat(
        self,
        messages: list[dict[str, str]],
        max_tokens: int | None = None,
        temperature: float | None = None,
        **kwargs: Any,
    ) -> str:
        self.calls.append([dict(m) for m in messages])
        if not self.responses:
            raise AssertionError("ScriptedLLM ran out of responses")
        return self.responses.pop(0)

    def count_tokens(self, text: str) -> int:
        return len(text.split())


@pytest.fixture
def make_llm() -> Callable[..., ScriptedLLM]:
    """Build a ScriptedLLM from positional responses."""

    def _make(*responses: str) -> ScriptedLLM:
        return ScriptedLLM(list(responses))

    return _make


@pytest.fixture
def env_file(tmp_path: Path) -> Path:
    """An empty .env so tests never read the developer's real one."""

    path = tmp_path / ".env"
    path.write_text("", encoding="utf-8")
    return path


@pytest.fixture
def llm_config() -> LLMConfig:
    """Provide a test LLM configuration."""
    return LLMConfig(
        provider="openai",
        openai_api_key="test-key",
        openai_model="gpt-4o-mini",
    )


@pytest.fixture
def app_config(llm_config: LLMConfig) -> AppConfig:
    """Provide a test application configuration."""
    return AppConfig(
        log_level="DEBUG",
        debug=True,
        llm=llm_config,
        agent=AgentConfig(max_iterations=4),
        workflow=WorkflowConfig(max_steps=20),
    )
