"""Single-turn weather and search Q&A agent."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from agent_workflows.agents import AgentExecutionConfig, ToolCallingAgent
from agent_workflows.console import ConsoleReader
from agent_workflows.llm.provider import LLMProvider
from agent_workflows.memory import TokenMemory
from agent_workflows.tools import OpenMeteoTool, Tool, WikipediaTool

logger = logging.getLogger(__name__)

DEFAULT_PROMPT = "What is the current weather in Las Vegas?"


def build_weather_agent(
    llm: LLMProvider,
    *,
    memory_max_tokens: int = 4096,
    tools: Sequence[Tool] | None = None,
) -> ToolCallingAgent:
    return ToolCallingAgent(
        llm=llm,
        memory=TokenMemory(llm, max_tokens=memory_max_tokens),
        tools=list(tools) if tools is not None else [OpenMeteoTool(), WikipediaTool()],
    )


def run_weather_session(
    agent: ToolCallingAgent,
    reader: ConsoleReader,
    execution: AgentExecutionConfig | None = None,
) -> int:
    """Answer prompts until the reader ends. Returns the number of failed turns."""

    failures = 0
    for item in reader:
        try:
            response = agent.run(item.prompt, execution)
        except Exception as e:
            failures += 1
            logger.exception("Agent run failed", extra={"iteration": item.iteration})
            reader.write_error(e)
            continue
        reader.write("Agent 🤖 : ", response.text)
    return failures
