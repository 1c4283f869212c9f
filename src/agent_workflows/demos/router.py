"""Message-routing workflow.

`routeUserMessage` asks the model which specialised route fits the latest user
message, given the conversation so far. Every route currently hands over to
`generateResponse`, which answers from the conversation memory.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from agent_workflows.console import ConsoleReader
from agent_workflows.llm.provider import LLMProvider
from agent_workflows.memory import (
    ConversationSession,
    Message,
    ReadOnlyMemory,
    UnconstrainedMemory,
    to_chat_messages,
)
from agent_workflows.prompts import PromptTemplate
from agent_workflows.workflow import StepResult, Workflow
from agent_workflows.workflow.engine import DEFAULT_MAX_STEPS

logger = logging.getLogger(__name__)


class Route(BaseModel):
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)


ROUTES: list[Route] = [
    Route(
        name="language",
        description=(
            "Handles general language queries. Best at language-based tasks like text "
            "generation or comprehension."
        ),
    ),
    Route(
        name="vision",
        description=(
            "Handles queries about the content of an image. Capable of understanding objects "
            "and scenes within an image."
        ),
    ),
    Route(
        name="timeseries",
        description="Handles queries that requires analyzing trends, patterns, and behaviors over time.",
    ),
]

RouteName = Literal["language", "vision", "timeseries"]


class RoutePromptInput(BaseModel):
    message: str
    memory: list[Message]
    routes: list[Route]


# Includes message history for better contextual reasoning.
ROUTE_MESSAGE_PROMPT = PromptTemplate(
    schema=RoutePromptInput,
    template="""You are an assistant tasked with routing the users query based on their most recent message.

The following routes are available:
{% for route in routes %}
Name: {{ route.name }}
Description: {{ route.description }}
{% endfor %}

Message History:
{% for m in memory %}
{{ m.role }}: {{ m.text }}
{% endfor %}

User Message:
{{ message }}

Choose the most appropriate route for the user message.
""",
)


class RouterState(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    response: str | None = None
    memory: ReadOnlyMemory


class RouterOutput(RouterState):
    response: str


class RouteDecision(BaseModel):
    route: RouteName


class GeneratedResponse(BaseModel):
    response: str


def build_router_workflow(
    llm: LLMProvider,
    *,
    structured_max_retries: int = 3,
    max_steps: int = DEFAULT_MAX_STEPS,
) -> Workflow:
    def route_user_message(state: RouterState) -> StepResult:
        messages = state.memory.messages
        if not messages:
            raise ValueError("There is no user message to route")

        prompt = ROUTE_MESSAGE_PROMPT.render(
            message=messages[-1].text,
            memory=messages[:-1],
            routes=ROUTES,
        )
        parsed = llm.generate_structured(
            RouteDecision,
            [{"role": "user", "content": prompt}],
            max_retries=structured_max_retries,
        )
        return StepResult.goto(parsed.route)

    def routed(name: str) -> Callable[[RouterState], StepResult]:
        def handler(_state: RouterState) -> StepResult:
            logger.info("Routed message", extra={"route": name})
            return StepResult.goto("generateResponse")

        return handler

    def generate_response(state: RouterState) -> StepResult:
        parsed = llm.generate_structured(
            GeneratedResponse,
            [
                {"role": "system", "content": "You are a helpful AI assistant."},
                *to_chat_messages(state.memory.messages),
            ],
            max_retries=structured_max_retries,
        )
        return StepResult.finish(response=parsed.response)

    workflow = Workflow(RouterState, RouterOutput, name="router", max_steps=max_steps)
    workflow.add_step("routeUserMessage", route_user_message)
    for route in ROUTES:
        workflow.add_step(route.name, routed(route.name))
    workflow.add_step("generateResponse", generate_response)
    return workflow


def run_router_session(
    workflow: Workflow,
    reader: ConsoleReader,
    session: ConversationSession | None = None,
) -> ConversationSession:
    session = session or ConversationSession()

    for item in reader:
        # Session memory only grows by complete user and assistant exchanges.
        user_message = Message.user(item.prompt)
        turn = UnconstrainedMemory()
        turn.add_many([*session.memory.messages, user_message])
        try:
            outcome = workflow.run({"memory": turn.as_read_only()})
        except Exception as e:
            logger.exception("Router workflow failed", extra={"session_id": session.session_id})
            reader.write_error(e)
            continue

        response = outcome.result.response
        session.memory.add_many([user_message, Message.assistant(response)])
        session.remember({"response": response, "steps": list(outcome.steps)})
        reader.write("🤖 Answer", response)

    return session
