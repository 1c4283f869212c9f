from .tool_calling import (
    AgentDecision,
    AgentError,
    AgentExecutionConfig,
    AgentMaxIterationsError,
    AgentRetryLimitError,
    AgentRunResult,
    ToolCallingAgent,
)

__all__ = [
    "AgentDecision",
    "AgentError",
    "AgentExecutionConfig",
    "AgentMaxIterationsError",
    "AgentRetryLimitError",
    "AgentRunResult",
    "ToolCallingAgent",
]
