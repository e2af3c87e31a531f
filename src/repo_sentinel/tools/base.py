"""Tool protocol shared by every provider toolset."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any

from ..models import ToolDef

ToolHandler = Callable[[dict[str, Any]], Awaitable[str]]


class BaseTool(ABC):
    """Base class for agent tools."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        ...

    @property
    def parameters(self) -> dict[str, Any]:
        """JSON Schema for parameters. Defaults to no arguments."""
        return {"type": "object", "properties": {}}

    @abstractmethod
    async def execute(self, params: dict[str, Any]) -> str:
        ...

    def to_def(self) -> ToolDef:
        return ToolDef(name=self.name, description=self.description, parameters=self.parameters)

    def to_tool_schema(self) -> dict[str, Any]:
        """Standard function-calling schema for the model."""
        return self.to_def().to_tool_schema()


class FunctionTool(BaseTool):
    """Adapts a plain ``(definition, handler)`` pair to the tool protocol."""

    def __init__(self, definition: ToolDef, handler: ToolHandler) -> None:
        self._definition = definition
        self._handler = handler

    @property
    def name(self) -> str:
        return self._definition.name

    @property
    def description(self) -> str:
        return self._definition.description

    @property
    def parameters(self) -> dict[str, Any]:
        return self._definition.parameters

    def to_def(self) -> ToolDef:
        return self._definition

    async def execute(self, params: dict[str, Any]) -> str:
        return await self._handler(params)
