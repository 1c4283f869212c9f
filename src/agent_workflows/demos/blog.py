"""Blog-writing workflow: preprocess -> planner -> writer -> editor.

The preprocess step turns the user's message into a topic and notes (or
rejects it). The planner researches the topic with a tool-calling agent, the
writer drafts the post and the editor produces the final version. Topic and
notes carry over between turns so follow-up messages refine the same post.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from pydantic import BaseModel, Field, model_validator

from agent_workflows.agents import AgentExecutionConfig, ToolCallingAgent
from agent_workflows.console import ConsoleReader
from agent_workflows.llm.provider import LLMProvider
from agent_workflows.memory import ConversationSession, UnconstrainedMemory
from agent_workflows.tools import LLMTool, WikipediaTool
from agent_workflows.workflow import RunView, StepResult, Workflow
from agent_workflows.workflow.engine import DEFAULT_MAX_STEPS

logger = logging.getLogger(__name__)

GREETING = "I am a content creator agent. Please give me a topic for which I will write a blog post.."


class BlogState(BaseModel):
    input: str
    output: str | None = None

    topic: str | None = None
    notes: list[str] = Field(default_factory=list)
    plan: str | None = None
    draft: str | None = None


class BlogOutput(BlogState):
    output: str


class PreprocessResult(BaseModel):
    error: str | None = Field(
        default=None,
        description=(
            "Use this field only if the user message is not a valid topic and is not a note "
            "to an existing blog post."
        ),
    )
    topic: str | None = Field(default=None, description="The blog post topic")
    notes: list[str] = Field(default_factory=list, description="User feedback to apply")

    @model_validator(mode="after")
    def _topic_or_error(self) -> PreprocessResult:
        if not self.error and not self.topic:
            raise ValueError("Either error or topic must be provided")
        return self


AgentFactory = Callable[[], ToolCallingAgent]


def _section(title: str, lines: list[str]) -> list[str]:
    return [f"# {title}", *lines, ""] if lines else []


def build_preprocess_prompt(state: BlogState) -> str:
    lines = [
        "Your task is to rewrite the user query so that it guides the content planner and editor "
        "to craft a blog post that perfectly aligns with the user's needs. Notes should be used "
        "only if the user complains about something.",
        "If the user query does not describe a topic and is not feedback on the previous post, "
        "explain why in the error field.",
        "",
        *_section("Previous Topic", [state.topic] if state.topic else []),
        *_section("Previous Notes", state.notes),
        "# User Query",
        state.input or "empty",
    ]
    return "\n".join(lines)


def build_planner_prompt(state: BlogState) -> str:
    return "\n".join(
        [
            f'You are a Content Planner. Your task is to write a content plan for "{state.topic}" '
            "topic in Markdown format.",
            "",
            "# Objectives",
            "1. Prioritize the latest trends, key players, and noteworthy news.",
            "2. Identify the target audience, considering their interests and pain points.",
            "3. Develop a detailed content outline including introduction, key points, and a call "
            "to action.",
            "4. Include SEO keywords and relevant sources.",
            "",
            *_section("Notes", state.notes),
            "Provide a structured output that covers the mentioned sections.",
        ]
    )


def build_writer_prompt(state: BlogState) -> str:
    return "\n".join(
        [
            "You are a Content Writer. Your task is to write a compelling blog post based on the "
            "provided context.",
            "",
            "# Context",
            f"{state.plan}",
            "",
            "# Objectives",
            "- An engaging introduction",
            "- Insightful body paragraphs (2-3 per section)",
            "- Properly named sections/subtitles",
            "- A summarizing conclusion",
            "- Format: Markdown",
            "",
            *_section("Notes", state.notes),
            "Ensure the content flows naturally, incorporates SEO keywords, and is well-structured.",
        ]
    )


def build_editor_prompt(state: BlogState) -> str:
    return "\n".join(
        [
            "You are an Editor. Your task is to transform the following draft blog post to a "
            "final version.",
            "",
            "# Draft",
            f"{state.draft}",
            "",
            "# Objectives",
            "- Fix Grammatical errors",
            "- Journalistic best practices",
            "",
            *_section("Notes", state.notes),
            "",
            "IMPORTANT: The final version must not contain any editor's comments.",
        ]
    )


def build_blog_workflow(
    llm: LLMProvider,
    *,
    agent_factory: AgentFactory | None = None,
    agent_execution: AgentExecutionConfig | None = None,
    structured_max_retries: int = 3,
    max_steps: int = DEFAULT_MAX_STEPS,
) -> Workflow:
    def default_agent() -> ToolCallingAgent:
        return ToolCallingAgent(
            llm=llm,
            memory=UnconstrainedMemory(),
            tools=[WikipediaTool(), LLMTool(llm)],
        )

    make_agent = agent_factory or default_agent

    def preprocess(state: BlogState) -> StepResult:
        parsed = llm.generate_structured(
            PreprocessResult,
            [{"role": "user", "content": build_preprocess_prompt(state)}],
            max_retries=structured_max_retries,
        )
        if parsed.error:
            return StepResult.finish(output=parsed.error)
        return StepResult.updating(topic=parsed.topic, notes=parsed.notes)

    def planner(state: BlogState) -> StepResult:
        result = make_agent().run(build_planner_prompt(state), agent_execution)
        return StepResult.updating(plan=result.text)

    def writer(state: BlogState) -> StepResult:
        draft = llm.chat([{"role": "system", "content": build_writer_prompt(state)}])
        return StepResult.updating(draft=draft)

    def editor(state: BlogState) -> StepResult:
        output = llm.chat([{"role": "system", "content": build_editor_prompt(state)}])
        return StepResult.updating(output=output)

    return (
        Workflow(BlogState, BlogOutput, name="blog", max_steps=max_steps)
        .add_step("preprocess", preprocess)
        .add_strict_step("planner", ["topic"], planner)
        .add_strict_step("writer", ["plan"], writer)
        .add_strict_step("editor", ["draft"], editor)
    )


def next_turn_state(prompt: str, session: ConversationSession) -> dict[str, object]:
    """Initial state for a turn, carrying topic and notes from the previous one."""

    state: dict[str, object] = {"input": prompt}
    for key in ("topic", "notes"):
        value = session.last_result.get(key)
        if value is not None:
            state[key] = value
    return state


def run_blog_session(
    workflow: Workflow,
    reader: ConsoleReader,
    session: ConversationSession | None = None,
) -> ConversationSession:
    session = session or ConversationSession()
    reader.write("ℹ️ ", GREETING)

    def show_step(step: str, run: RunView) -> None:
        reader.write(f"-> ▶️ {step}", run.state_json())

    for item in reader:
        try:
            outcome = workflow.run(next_turn_state(item.prompt, session), observers=[show_step])
        except Exception as e:
            logger.exception("Blog workflow failed", extra={"session_id": session.session_id})
            reader.write_error(e)
            continue

        session.remember(outcome.result.model_dump())
        reader.write("🤖 Answer", outcome.result.output)

    return session
