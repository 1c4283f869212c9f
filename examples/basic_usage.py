#!/usr/bin/env python3
"""Programmatic workflow example.

This demonstrates the workflow engine on its own, without a chat model:

* a state model with an input and an optional output
* a strict step that requires a field set by an earlier step
* routing by returning the next step's name
* a listener printing each step as it starts
"""

from __future__ import annotations

import argparse
from collections.abc import Sequence

from pydantic import BaseModel, Field

from agent_workflows.core.logging import configure_logging
from agent_workflows.workflow import RunView, StepResult, Workflow, WorkflowError


class TicketState(BaseModel):
    text: str
    category: str | None = None
    tags: list[str] = Field(default_factory=list)
    reply: str | None = None


class TicketOutput(TicketState):
    reply: str


def classify(state: TicketState) -> StepResult:
    lowered = state.text.lower()
    if "refund" in lowered or "invoice" in lowered:
        return StepResult.goto("billing", category="billing")
    if "error" in lowered or "crash" in lowered:
        return StepResult.goto("technical", category="technical")
    return StepResult.finish(category="other", reply="Thanks, a human will get back to you.")


def billing(state: TicketState) -> StepResult:
    return StepResult.goto("respond", tags=[*state.tags, "finance"])


def technical(state: TicketState) -> dict[str, object]:
    # No `next`: falls through to "respond", registered right after.
    return {"tags": [*state.tags, "engineering"]}


def respond(state: TicketState) -> StepResult:
    return StepResult.finish(reply=f"Routed to {state.category} ({', '.join(state.tags)}).")


def build_workflow() -> Workflow:
    return (
        Workflow(TicketState, TicketOutput, name="tickets")
        .add_step("classify", classify)
        .add_strict_step("billing", ["category"], billing)
        .add_strict_step("technical", ["category"], technical)
        .add_strict_step("respond", ["category"], respond)
    )


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Route a support ticket (workflow example).")
    parser.add_argument("text", help="Ticket text")
    parser.add_argument("--log-level", default="WARNING")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    configure_logging(args.log_level, fmt="text")

    def show(step: str, run: RunView) -> None:
        print(f"-> {step} {run.state_json()}")

    try:
        outcome = build_workflow().observe(show).run({"text": args.text})
    except WorkflowError as exc:
        print(exc.dump())
        return 1

    print(f"Steps: {' -> '.join(outcome.steps)}")
    print(f"Reply: {outcome.result.reply}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
