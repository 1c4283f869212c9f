"""Core package initialization."""

from agent_workflows.core.config import AgentConfig, AppConfig, LLMConfig, WorkflowConfig
from agent_workflows.core.logging import configure_logging

__all__ = [
    "AgentConfig",
    "AppConfig",
    "LLMConfig",
    "WorkflowConfig",
    "configure_logging",
]
