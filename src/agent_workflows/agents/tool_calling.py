"""A bounded tool-calling agent.

Each iteration asks the model for a structured decision: either call one tool
with JSON input, or give the final answer. Tool observations are fed back into
the next iteration. Failed iterations (unparseable decisions, unknown tools,
tool errors) are retried within per-step and per-run budgets.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import requests
from pydantic import BaseModel, Field, model_validator

from agent_workflows.llm.provider import LLMProvider, StructuredOutputError
from agent_workflows.memory import BaseMemory, Message, UnconstrainedMemory, to_chat_messages
from agent_workflows.tools import Tool, ToolError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a helpful assistant that answers the user's question.
The question may require tools. Call at most one tool per reply and wait for its observation.
When you know the answer, reply with a final_answer.

Available tools:
{tools}
"""


class AgentError(RuntimeError):
    pass


class AgentMaxIterationsError(AgentError):
    pass


class AgentRetryLimitError(AgentError):
    pass


class AgentDecision(BaseModel):
    thought: str = Field(default="", description="Short reasoning for this step")
    tool_name: str | None = Field(default=None, description="Name of the tool to call")
    tool_input: dict[str, Any] = Field(default_factory=dict, description="JSON input for the tool")
    final_answer: str | None = Field(default=None, description="Answer for the user")

    @model_validator(mode="after")
    def _exactly_one_action(self) -> AgentDecision:
        if (self.tool_name is None) == (self.final_answer is None):
            raise ValueError("Provide either tool_name or final_answer, not both or neither")
        return self


@dataclass(frozen=True, slots=True)
class AgentExecutionConfig:
    max_iterations: int = 8
    max_retries_per_step: int = 3
    total_max_retries: int = 10


@dataclass(frozen=True, slots=True)
class AgentStep:
    decision: AgentDecision
    observation: str | None = None


@dataclass(frozen=True, slots=True)
class AgentRunResult:
    text: str
    iterations: int
    steps: list[AgentStep] = field(default_factory=list)


class ToolCallingAgent:
    def __init__(
        self,
        *,
        llm: LLMProvider,
        memory: BaseMemory | None = None,
        tools: Sequence[Tool] = (),
        system_prompt: str = SYSTEM_PROMPT,
    ) -> None:
        names = [t.name for t in tools]
        if len(set(names)) != len(names):
            raise ValueError(f"Tool names must be unique: {names}")

        self.llm = llm
        self.memory = memory if memory is not None else UnconstrainedMemory()
        self.tools = {t.name: t for t in tools}
        self._system_prompt = system_prompt

    def _system_message(self) -> dict[str, str]:
        described = "\n".join(t.describe() for t in self.tools.values()) or "(none)"
        return {"role": "system", "content": self._system_prompt.format(tools=described)}

    def run(
        self, prompt: str, execution: AgentExecutionConfig | None = None
    ) -> AgentRunResult:
        execution = execution or AgentExecutionConfig()
        # Memory only receives the exchange once the run succeeds.
        user_message = Message.user(prompt)
        history = to_chat_messages([*self.memory.messages, user_message])
        scratchpad: list[dict[str, str]] = []
        steps: list[AgentStep] = []
        total_retries = 0

        for iteration in range(1, execution.max_iterations + 1):
            step_retries = 0
            while True:
                messages = [self._system_message(), *history, *scratchpad]
                try:
                    decision = self.llm.generate_structured(AgentDecision, messages, max_retries=1)
                    if decision.final_answer is not None:
                        steps.append(AgentStep(decision=decision))
                        self.memory.add_many(
                            [user_message, Message.assistant(decision.final_answer)]
                        )
                        logger.info(
                            "Agent finished", extra={"iterations": iteration, "retries": total_retries}
                        )
                        return AgentRunResult(
                            text=decision.final_answer, iterations=iteration, steps=steps
                        )
                    observation = self._call_tool(decision)
                except (StructuredOutputError, ToolError, requests.RequestException) as e:
                    step_retries += 1
                    total_retries += 1
                    logger.warning(
                        "Agent iteration failed",
                        extra={"iteration": iteration, "retry": step_retries, "error": str(e)},
                    )
                    if (
                        step_retries > execution.max_retries_per_step
                        or total_retries > execution.total_max_retries
                    ):
                        raise AgentRetryLimitError(
                            f"Agent gave up after {total_retries} retries: {e}"
                        ) from e
                    scratchpad.append(
                        {"role": "user", "content": f"Error: {e}\nFix the problem and try again."}
                    )
                    continue

                steps.append(AgentStep(decision=decision, observation=observation))
                scratchpad.append(
                    {"role": "assistant", "content": decision.model_dump_json(exclude_none=True)}
                )
                scratchpad.append({"role": "user", "content": f"Observation:\n{observation}"})
                break

        raise AgentMaxIterationsError(
            f"Agent did not reach a final answer within {execution.max_iterations} iterations"
        )

    def _call_tool(self, decision: AgentDecision) -> str:
        assert decision.tool_name is not None
        tool = self.tools.get(decision.tool_name)
        if tool is None:
            raise ToolError(
                f"Unknown tool '{decision.tool_name}'. Available: {', '.join(self.tools) or 'none'}"
            )
        logger.debug(
            "Agent calling tool",
            extra={"tool": tool.name, "tool_input": json.dumps(decision.tool_input, default=str)},
        )
        return tool.run(decision.tool_input).text
