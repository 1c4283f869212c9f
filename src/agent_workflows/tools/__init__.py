"""Tools callable by agents."""

from .base import Tool, ToolError, ToolOutput
from .llm_tool import LLMTool
from .weather import OpenMeteoTool
from .wikipedia import WikipediaTool

__all__ = [
    "LLMTool",
    "OpenMeteoTool",
    "Tool",
    "ToolError",
    "ToolOutput",
    "WikipediaTool",
]
