"""Tool registry: name -> validated definition + async handler."""

from __future__ import annotations

import inspect
import json
import logging
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError

from .errors import (
    ArgumentParseError,
    DuplicateToolError,
    ToolExecutionError,
    UnknownToolError,
)
from .models import ToolDef
from .tools.base import BaseTool, FunctionTool, ToolHandler

logger = logging.getLogger(__name__)


class ToolRegistry:
    """
    Catalog of tools the model may call.

    Names are unique; registering a name twice raises DuplicateToolError.
    Build it once per run; after that it is only read, so concurrent
    ``execute`` calls are safe.
    """

    def __init__(self, tools: Iterable[BaseTool] | None = None) -> None:
        self._tools: dict[str, BaseTool] = {}
        if tools:
            self.register_all(tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def names(self) -> list[str]:
        return list(self._tools)

    def register(self, definition: ToolDef | dict[str, Any], handler: ToolHandler) -> None:
        """Register a tool from a definition (ToolDef or OpenAI schema dict) and async handler."""
        if not isinstance(definition, ToolDef):
            try:
                definition = ToolDef.from_tool_schema(definition)
            except ValidationError as exc:
                raise ValueError(f"Invalid tool definition: {exc}") from exc
        if not inspect.iscoroutinefunction(handler) and not inspect.iscoroutinefunction(
            getattr(handler, "__call__", None)
        ):
            raise TypeError(f"Handler for tool {definition.name!r} must be an async callable")
        self.register_tool(FunctionTool(definition, handler))

    def register_tool(self, tool: BaseTool) -> None:
        definition = tool.to_def()
        if definition.name in self._tools:
            raise DuplicateToolError(f"Tool already registered: {definition.name}")
        self._tools[definition.name] = tool
        logger.debug("Registered tool %s", definition.name)

    def register_all(self, tools: Iterable[BaseTool]) -> None:
        for tool in tools:
            self.register_tool(tool)

    def get_tool_definitions(self) -> tuple[dict[str, Any], ...]:
        """Function-calling schemas for every registered tool, in registration order."""
        return tuple(tool.to_tool_schema() for tool in self._tools.values())

    @staticmethod
    def parse_arguments(raw_arguments: str | None) -> dict[str, Any]:
        """Parse a raw argument payload into a dict; blank payloads mean no arguments."""
        if raw_arguments is None or not raw_arguments.strip():
            return {}
        try:
            parsed = json.loads(raw_arguments)
        except (ValueError, RecursionError) as exc:
            raise ArgumentParseError(f"Invalid tool arguments: {exc}") from exc
        if not isinstance(parsed, dict):
            raise ArgumentParseError(
                f"Tool arguments must be a JSON object, got {type(parsed).__name__}"
            )
        return parsed

    async def execute(self, name: str, raw_arguments: str | None) -> str:
        """Parse the arguments and run the named tool. Handler errors are not swallowed."""
        params = self.parse_arguments(raw_arguments)
        tool = self._tools.get(name)
        if tool is None:
            raise UnknownToolError(f"Unknown tool: {name}")

        try:
            output = await tool.execute(params)
        except Exception as exc:
            raise ToolExecutionError(str(exc) or exc.__class__.__name__) from exc

        if not isinstance(output, str):
            raise ToolExecutionError(
                f"Tool {name} returned {type(output).__name__}, expected str"
            )
        return output
