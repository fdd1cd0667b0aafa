from .base import Tool, ToolCallResult, ToolRegistry, create_tool, execute_tool_call
from .search_tools import (
    LocalSearchArgs,
    ReadNoteArgs,
    SearchTools,
    TimeRangeArgs,
    WebSearchArgs,
)

__all__ = [
    "Tool",
    "ToolCallResult",
    "ToolRegistry",
    "create_tool",
    "execute_tool_call",
    "LocalSearchArgs",
    "ReadNoteArgs",
    "SearchTools",
    "TimeRangeArgs",
    "WebSearchArgs",
]
