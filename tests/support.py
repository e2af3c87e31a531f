"""Builders for fake chat completions and clients used across the tests."""
from __future__ import annotations

import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock

from openai.types.chat import ChatCompletion


def tool_call(call_id: str, name: str, arguments: Any = "{}") -> dict[str, Any]:
    if not isinstance(arguments, str):
        arguments = json.dumps(arguments)
    return {
        "id": call_id,
        "type": "function",
        "function": {"name": name, "arguments": arguments},
    }


def choice(
    content: str | None = None,
    tool_calls: list[dict[str, Any]] | None = None,
    finish_reason: str | None = None,
    index: int = 0,
) -> dict[str, Any]:
    message: dict[str, Any] = {"role": "assistant", "content": content}
    if tool_calls:
        message["tool_calls"] = tool_calls
    if finish_reason is None:
        finish_reason = "tool_calls" if tool_calls else "stop"
    return {"index": index, "message": message, "finish_reason": finish_reason}


def completion(*choices: dict[str, Any]) -> ChatCompletion:
    for i, c in enumerate(choices):
        c["index"] = i
    return ChatCompletion.model_validate(
        {
            "id": "chatcmpl-test",
            "object": "chat.completion",
            "created": 0,
            "model": "test-model",
            "choices": list(choices),
        }
    )


def text_completion(content: str) -> ChatCompletion:
    return completion(choice(content=content))


def fake_client(*responses: Any) -> MagicMock:
    """A stand-in AsyncOpenAI whose completions.create returns/raises responses in order."""
    client = MagicMock()
    client.chat.completions.create = AsyncMock(side_effect=list(responses))
    client.close = AsyncMock()
    return client


def sent_messages(client: MagicMock, call_index: int = -1) -> list[dict[str, Any]]:
    return client.chat.completions.create.call_args_list[call_index].kwargs["messages"]
