"""Agent workflows.

Provides:
- a step-graph workflow engine over pydantic state models
- chat-model providers with schema-validated JSON output
- conversation memory, prompt templates, tools and a tool-calling agent
- interactive weather, blog-writing and routing examples
"""

__version__ = "0.1.0"

from agent_workflows.workflow import END, StepResult, Workflow, WorkflowError

__all__ = ["__version__", "END", "StepResult", "Workflow", "WorkflowError"]
