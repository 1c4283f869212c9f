"""Unit tests for LLM providers and structured generation."""

from __future__ import annotations

from collections.abc import Callable
from types import SimpleNamespace
from typing import Any
from unittest.mock import Mock

import pytest
from pydantic import BaseModel

from agent_workflows.core.config import LLMConfig
from agent_workflows.llm.factory import LLMFactory
from agent_workflows.llm.llama_provider import LLaMAProvider
from agent_workflows.llm.openai_provider import OpenAIProvider
from agent_workflows.llm.provider import StructuredOutputError, extract_json_object


class Decision(BaseModel):
    route: str
    confidence: float = 1.0


def _completion(content: str) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def test_factory_creates_openai_provider(llm_config: LLMConfig) -> None:
    provider = LLMFactory.create(llm_config)

    assert isinstance(provider, OpenAIProvider)
    assert provider.model == "gpt-4o-mini"


def test_openai_provider_requires_api_key() -> None:
    with pytest.raises(ValueError, match="API key"):
        OpenAIProvider(LLMConfig(provider="openai", openai_api_key=None))


def test_llama_provider_requires_model_path() -> None:
    with pytest.raises(ValueError, match="model path"):
        LLaMAProvider(LLMConfig(provider="llama", llama_model_path=None))


def test_openai_chat_uses_configured_model(llm_config: LLMConfig) -> None:
    client = Mock()
    client.chat.completions.create.return_value = _completion("hello")
    provider = OpenAIProvider(llm_config, client=client)

    assert provider.generate("hi", max_tokens=5) == "hello"

    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gpt-4o-mini"
    assert kwargs["messages"] == [{"role": "user", "content": "hi"}]
    assert kwargs["max_tokens"] == 5
    assert kwargs["temperature"] == 0.7


def test_openai_empty_content_becomes_empty_string(llm_config: LLMConfig) -> None:
    client = Mock()
    client.chat.completions.create.return_value = _completion(None)  # type: ignore[arg-type]

    assert OpenAIProvider(llm_config, client=client).chat([{"role": "user", "content": "x"}]) == ""


def test_extract_json_object_tolerates_fences_and_prose() -> None:
    assert extract_json_object('{"a": 1}') == {"a": 1}
    assert extract_json_object('```json\n{"a": {"b": [1, 2]}}\n```') == {"a": {"b": [1, 2]}}
    assert extract_json_object('Sure! {"route": "vision"} hope that helps') == {"route": "vision"}

    with pytest.raises(ValueError):
        extract_json_object("no json here")


def test_generate_structured_appends_schema_and_parses(make_llm: Callable[..., Any]) -> None:
    llm = make_llm('{"route": "vision"}')

    decision = llm.generate_structured(Decision, [{"role": "user", "content": "Where?"}])

    assert decision == Decision(route="vision")
    sent = llm.calls[0][-1]["content"]
    assert sent.startswith("Where?")
    assert '"route"' in sent


def test_generate_structured_retries_with_feedback(make_llm: Callable[..., Any]) -> None:
    llm = make_llm("not json", '{"confidence": 0.5}', '{"route": "language"}')

    decision = llm.generate_structured(
        Decision, [{"role": "user", "content": "Where?"}], max_retries=3
    )

    assert decision.route == "language"
    assert len(llm.calls) == 3
    retry_messages = llm.calls[1]
    assert retry_messages[-2] == {"role": "assistant", "content": "not json"}
    assert "invalid" in retry_messages[-1]["content"]


def test_generate_structured_gives_up(make_llm: Callable[..., Any]) -> None:
    llm = make_llm("nope", "still nope")

    with pytest.raises(StructuredOutputError) as exc_info:
        llm.generate_structured(Decision, [{"role": "user", "content": "Where?"}], max_retries=2)

    assert exc_info.value.attempts == 2
    assert exc_info.value.last_output == "still nope"


def test_generate_structured_does_not_mutate_caller_messages(
    make_llm: Callable[..., Any],
) -> None:
    llm = make_llm('{"route": "vision"}')
    messages = [{"role": "user", "content": "Where?"}]

    llm.generate_structured(Decision, messages)

    assert messages == [{"role": "user", "content": "Where?"}]


def test_openai_structured_output_uses_json_mode(llm_config: LLMConfig) -> None:
    client = Mock()
    client.chat.completions.create.return_value = _completion('{"route": "timeseries"}')
    provider = OpenAIProvider(llm_config, client=client)

    decision = provider.generate_structured(Decision, [{"role": "user", "content": "Trend?"}])

    assert decision.route == "timeseries"
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["response_format"] == {"type": "json_object"}
