"""Data models for messages, tools, and agent results."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, field_validator

_TOOL_NAME_RE = re.compile(r"^[a-zA-Z0-9_-]{1,64}$")


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


class Message(BaseModel):
    """A single message in a conversation."""

    role: str  # "system" | "user" | "assistant" | "tool"
    content: str | None = None
    tool_calls: list[dict[str, Any]] | None = None
    tool_call_id: str | None = None

    def to_chat_dict(self) -> dict[str, Any]:
        """Format for the chat completions API."""
        out: dict[str, Any] = {"role": self.role, "content": self.content}
        if self.tool_calls:
            out["tool_calls"] = self.tool_calls
        if self.tool_call_id is not None:
            out["tool_call_id"] = self.tool_call_id
        return out


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


class ToolDef(BaseModel):
    """Tool definition advertised to the model."""

    name: str
    description: str = ""
    parameters: dict[str, Any] = {"type": "object", "properties": {}}  # JSON Schema

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not _TOOL_NAME_RE.match(value):
            raise ValueError(f"invalid tool name: {value!r}")
        return value

    @field_validator("parameters")
    @classmethod
    def _check_parameters(cls, value: dict[str, Any]) -> dict[str, Any]:
        if value.get("type") != "object":
            raise ValueError("tool parameters schema must have type 'object'")
        return value

    @classmethod
    def from_tool_schema(cls, schema: dict[str, Any]) -> ToolDef:
        """Accept either the OpenAI function-calling shape or a bare definition."""
        fn = schema.get("function", schema)
        return cls(
            name=fn.get("name", ""),
            description=fn.get("description", ""),
            parameters=fn.get("parameters") or {"type": "object", "properties": {}},
        )

    def to_tool_schema(self) -> dict[str, Any]:
        """Standard function-calling schema (OpenAI-style)."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


@dataclass(slots=True)
class ToolCallRequest:
    """A tool call emitted by the model; arguments are still the raw JSON string."""

    id: str
    name: str
    arguments: str

    @classmethod
    def from_openai(cls, tool_call: Any) -> ToolCallRequest:
        return cls(
            id=tool_call.id,
            name=tool_call.function.name,
            arguments=tool_call.function.arguments or "",
        )


@dataclass(slots=True)
class ToolResult:
    """Payload sent back to the model after a tool finished."""

    tool_call_id: str  # must match the request id
    content: str

    def to_message(self) -> Message:
        return Message(role="tool", content=self.content, tool_call_id=self.tool_call_id)


@dataclass(slots=True)
class ToolOutcome:
    """Settled result of one tool execution: either output or error is set."""

    request: ToolCallRequest
    output: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_result(self) -> ToolResult:
        if self.ok:
            return ToolResult(tool_call_id=self.request.id, content=self.output or "")
        return ToolResult(
            tool_call_id=self.request.id,
            content=json.dumps({"error": self.error}),
        )


# ---------------------------------------------------------------------------
# Agent
# ---------------------------------------------------------------------------


@dataclass
class AgentResult:
    """Final outcome of one agent run."""

    content: str
    rounds: int = 0
    messages: list[Message] = field(default_factory=list)
    tool_outcomes: list[ToolOutcome] = field(default_factory=list)

    @property
    def failed_tool_calls(self) -> int:
        return sum(1 for o in self.tool_outcomes if not o.ok)
