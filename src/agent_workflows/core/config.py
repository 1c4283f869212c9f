"""Core configuration for agent workflows.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMConfig(BaseSettings):
    """Configuration for LLM providers."""

    provider: Literal["openai", "llama"] = Field(
        default="openai",
        description="LLM provider to use",
    )

    # OpenAI settings
    openai_api_key: str | None = Field(
        default=None,
        description="OpenAI API key",
    )
    openai_base_url: str | None = Field(
        default=None,
        description="Alternative OpenAI-compatible endpoint (e.g. a local server)",
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        description="OpenAI model to use",
    )
    openai_temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Temperature for OpenAI model",
    )

    # LLaMA settings
    llama_model_path: Path | None = Field(
        default=None,
        description="Path to LLaMA model file",
    )
    llama_n_ctx: int = Field(
        default=4096,
        gt=0,
        description="Context window size for LLaMA",
    )
    llama_n_threads: int | None = Field(
        default=None,
        description="Number of threads for LLaMA (None = auto)",
    )

    structured_max_retries: int = Field(
        default=3,
        ge=1,
        description="Attempts allowed when parsing schema-validated JSON output",
    )

    model_config = SettingsConfigDict(
        env_prefix="AGENT_WORKFLOWS_LLM_",
        env_file=".env",
        extra="ignore",
    )


class AgentConfig(BaseSettings):
    """Execution limits for the tool-calling agent."""

    max_iterations: int = Field(
        default=8,
        gt=0,
        description="Maximum reasoning iterations per agent run",
    )
    max_retries_per_step: int = Field(
        default=3,
        ge=0,
        description="Retries allowed for a single failing iteration",
    )
    total_max_retries: int = Field(
        default=10,
        ge=0,
        description="Retries allowed across the whole agent run",
    )
    memory_max_tokens: int = Field(
        default=4096,
        gt=0,
        description="Token budget for the agent's conversation memory",
    )

    model_config = SettingsConfigDict(
        env_prefix="AGENT_WORKFLOWS_AGENT_",
        env_file=".env",
        extra="ignore",
    )


class WorkflowConfig(BaseSettings):
    """Configuration for the workflow executor."""

    max_steps: int = Field(
        default=100,
        gt=0,
        description="Hard cap on executed steps per run (guards routing loops)",
    )

    model_config = SettingsConfigDict(
        env_prefix="AGENT_WORKFLOWS_WORKFLOW_",
        env_file=".env",
        extra="ignore",
    )


class AppConfig(BaseSettings):
    """Main configuration for the example programs."""

    log_level: str = Field(
        default="WARNING",
        description="Root logging level",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log output format; JSON is easier to ship, text is easier to read",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug logging for agent_workflows loggers",
    )

    llm: LLMConfig = Field(
        default_factory=LLMConfig,
        description="LLM configuration",
    )
    agent: AgentConfig = Field(
        default_factory=AgentConfig,
        description="Agent configuration",
    )
    workflow: WorkflowConfig = Field(
        default_factory=WorkflowConfig,
        description="Workflow configuration",
    )

    model_config = SettingsConfigDict(
        env_prefix="AGENT_WORKFLOWS_",
        env_file=".env",
        extra="ignore",
    )
