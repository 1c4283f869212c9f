"""CLI entrypoint for the interactive example programs."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from pydantic import ValidationError

from agent_workflows import __version__
from agent_workflows.agents import AgentExecutionConfig
from agent_workflows.console import ConsoleReader
from agent_workflows.core.config import AppConfig
from agent_workflows.core.logging import configure_logging
from agent_workflows.demos.blog import build_blog_workflow, run_blog_session
from agent_workflows.demos.router import build_router_workflow, run_router_session
from agent_workflows.demos.weather import DEFAULT_PROMPT, build_weather_agent, run_weather_session
from agent_workflows.llm.factory import LLMFactory

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agent-workflows",
        description="Interactive LLM agent and workflow examples",
    )
    parser.add_argument("--version", action="version", version=f"agent-workflows {__version__}")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override the configured log level (e.g. DEBUG, INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    weather = subparsers.add_parser(
        "weather", help="Ask a tool-using agent about the weather or anything on Wikipedia"
    )
    weather.add_argument(
        "--fallback",
        default=DEFAULT_PROMPT,
        help="Question used when the first input is left blank",
    )

    subparsers.add_parser("blog", help="Plan, write and edit a blog post on a topic")
    subparsers.add_parser("route", help="Route each message to a specialised handler and answer it")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = AppConfig()
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    configure_logging(
        args.log_level or config.log_level, fmt=config.log_format, debug=config.debug
    )

    try:
        llm = LLMFactory.create(config.llm)
    except (ValueError, ImportError) as e:
        logger.error("Could not create LLM provider", extra={"provider": config.llm.provider})
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    execution = AgentExecutionConfig(
        max_iterations=config.agent.max_iterations,
        max_retries_per_step=config.agent.max_retries_per_step,
        total_max_retries=config.agent.total_max_retries,
    )

    try:
        if args.command == "weather":
            agent = build_weather_agent(llm, memory_max_tokens=config.agent.memory_max_tokens)
            run_weather_session(agent, ConsoleReader(fallback=args.fallback), execution)
            return 0

        if args.command == "blog":
            workflow = build_blog_workflow(
                llm,
                agent_execution=execution,
                structured_max_retries=config.llm.structured_max_retries,
                max_steps=config.workflow.max_steps,
            )
            run_blog_session(workflow, ConsoleReader())
            return 0

        if args.command == "route":
            workflow = build_router_workflow(
                llm,
                structured_max_retries=config.llm.structured_max_retries,
                max_steps=config.workflow.max_steps,
            )
            run_router_session(workflow, ConsoleReader())
            return 0

        logger.error("Unknown command", extra={"command": args.command})
        return 2

    except KeyboardInterrupt:
        return 130

    except Exception:
        logger.exception("Command failed")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
