"""Tool definitions and execution for the agent layer."""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterator, Optional

from pydantic import BaseModel, ValidationError

from notesearch.core.exceptions import IndexUnavailableError

logger = logging.getLogger(__name__)

ToolHandler = Callable[..., Awaitable[str]]


@dataclass
class Tool:
    """A named, schema-validated async handler."""
    name: str
    description: str
    handler: ToolHandler
    schema: Optional[type[BaseModel]] = None
    is_background: bool = False
    display_name: str = ""
    category: str = "search"

    async def call(self, args: Optional[dict[str, Any]] = None) -> str:
        """Validate args against the schema and run the handler.

        Raises:
            pydantic.ValidationError: If args do not match the schema.
        """
        if self.schema is None:
            return await self.handler()
        return await self.handler(self.schema.model_validate(args or {}))


def create_tool(
    name: str,
    description: str,
    handler: ToolHandler,
    schema: Optional[type[BaseModel]] = None,
    is_background: bool = False,
    display_name: str = "",
    category: str = "search",
) -> Tool:
    return Tool(
        name=name,
        description=description,
        handler=handler,
        schema=schema,
        is_background=is_background,
        display_name=display_name or name,
        category=category,
    )


@dataclass
class ToolCallResult:
    tool_name: str
    result: str
    success: bool


class ToolRegistry:
    """Ordered tool collection owned by the caller."""

    def __init__(self, tools: Optional[list[Tool]] = None):
        self._tools: dict[str, Tool] = {}
        for tool in tools or []:
            self.register(tool)

    def register(self, tool: Tool) -> None:
        if tool.name in self._tools:
            logger.warning(f"Replacing registered tool '{tool.name}'")
        self._tools[tool.name] = tool

    def get(self, name: str) -> Optional[Tool]:
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def tools(self) -> list[Tool]:
        return list(self._tools.values())

    def __iter__(self) -> Iterator[Tool]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)


async def execute_tool_call(
    tool_call: Optional[dict[str, Any]], tools: list[Tool] | ToolRegistry
) -> ToolCallResult:
    """Run one tool call and report the outcome as data.

    Args:
        tool_call: {"name": ..., "args": {...}}.
        tools: Available tools.

    Returns:
        Tool call result. success is False for unknown tools, invalid
        arguments, an unavailable index and handler errors.
    """
    if not tool_call or not tool_call.get("name"):
        return ToolCallResult(
            tool_name="unknown",
            result="Error: Invalid tool call - missing tool name",
            success=False,
        )

    name = tool_call["name"]
    available = list(tools)
    tool = next((t for t in available if t.name == name), None)
    if tool is None:
        names = ", ".join(t.name for t in available)
        return ToolCallResult(
            tool_name=name,
            result=(
                f"Error: Tool '{name}' not found. Available tools: {names}. "
                "Make sure you have the tool enabled in the Agent settings."
            ),
            success=False,
        )

    try:
        result = await tool.call(tool_call.get("args") or {})
    except ValidationError as e:
        logger.warning(f"Invalid arguments for tool {name}: {e}")
        return ToolCallResult(
            tool_name=name, result=f"Error: Invalid arguments for {name}: {e}", success=False
        )
    except IndexUnavailableError as e:
        logger.error(f"Search index unavailable for tool {name}: {e}")
        return ToolCallResult(
            tool_name=name, result=f"Error: Search index unavailable: {e}", success=False
        )
    except Exception as e:
        logger.error(f"Error executing tool {name}: {e}")
        return ToolCallResult(tool_name=name, result=f"Error: {e}", success=False)

    return ToolCallResult(tool_name=name, result=result, success=True)
