from __future__ import annotations

from pydantic import BaseModel, Field

from agent_workflows.llm.provider import LLMProvider

from .base import Tool, ToolOutput


class LLMToolInput(BaseModel):
    task: str = Field(min_length=1, description="Self-contained instruction for the language model")


class LLMTool(Tool):
    """Hands a sub-task (summarise, rewrite, brainstorm) to the chat model."""

    name = "LLM"
    description = "Ask a language model to perform a self-contained text task."
    input_model = LLMToolInput

    def __init__(self, llm: LLMProvider) -> None:
        self._llm = llm

    def _run(self, tool_input: LLMToolInput) -> ToolOutput:
        return ToolOutput(text=self._llm.chat([{"role": "user", "content": tool_input.task}]))
