"""Conversation session: message history and model round-trips."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any

import openai
from openai import AsyncOpenAI
from openai.types.chat import ChatCompletion

from .errors import TransportError, classify_transport_error
from .models import Message, ToolResult

logger = logging.getLogger(__name__)

TOOL_CALLS_FINISH_REASON = "tool_calls"


def merge_choices(completion: ChatCompletion) -> Message:
    """
    Fold every choice of a completion into one assistant message.

    Some OpenAI-compatible backends return text and tool calls in separate
    choices. Non-empty contents are joined with newlines (None when there are
    none); tool calls are concatenated in choice order.
    """
    contents: list[str] = []
    tool_calls: list[dict[str, Any]] = []
    for choice in completion.choices:
        message = choice.message
        if message.content:
            contents.append(message.content)
        for tc in message.tool_calls or []:
            tool_calls.append(tc.model_dump(exclude_none=True))
    return Message(
        role="assistant",
        content="\n".join(contents) or None,
        tool_calls=tool_calls or None,
    )


class ConversationSession:
    """
    Manages one conversation with an OpenAI-compatible chat completions API.

    The tool catalog is snapshotted when the session starts. Every call to
    :meth:`chat` or :meth:`submit_tool_results` sends the full history and
    appends exactly one merged assistant message.

    Example::

        session = ConversationSession(client, "gpt-4.1-nano", system_prompt="Be terse.")
        completion = await session.chat("Hello!")
        while ConversationSession.requires_tool_call(completion):
            results = [...]  # one ToolResult per requested tool call
            completion = await session.submit_tool_results(results)
    """

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str,
        *,
        system_prompt: str | None = None,
        tools: Iterable[dict[str, Any]] | None = None,
    ) -> None:
        self._client = client
        self.model = model
        self._tools: tuple[dict[str, Any], ...] = ()
        self._messages: list[Message] = []
        self.start(system_prompt, tools)

    def __len__(self) -> int:
        return len(self._messages)

    @property
    def tools(self) -> tuple[dict[str, Any], ...]:
        return self._tools

    def start(
        self,
        system_prompt: str | None = None,
        tools: Iterable[dict[str, Any]] | None = None,
    ) -> None:
        """Reset history to an optional system message and snapshot the tool catalog."""
        self._tools = tuple(tools or ())
        self._messages = []
        if system_prompt:
            self._messages.append(Message(role="system", content=system_prompt))

    @staticmethod
    def requires_tool_call(completion: ChatCompletion) -> bool:
        """True if any choice stopped because tool calls are pending."""
        return any(
            choice.finish_reason == TOOL_CALLS_FINISH_REASON
            for choice in completion.choices
        )

    def add_user_message(self, content: str) -> None:
        self._messages.append(Message(role="user", content=content))

    def add_assistant_message(self, content: str) -> None:
        self._messages.append(Message(role="assistant", content=content))

    def get_messages(self) -> list[Message]:
        """Return a copy of the history."""
        return [m.model_copy(deep=True) for m in self._messages]

    def clear_messages(self) -> None:
        self._messages = []

    async def chat(self, user_message: str) -> ChatCompletion:
        """Append a user message, request a completion and record the merged reply."""
        self.add_user_message(user_message)
        return await self._complete()

    async def submit_tool_results(self, results: Sequence[ToolResult]) -> ChatCompletion:
        """Append one tool message per result, request a completion and record the reply."""
        self._messages.extend(result.to_message() for result in results)
        return await self._complete()

    async def _complete(self) -> ChatCompletion:
        params: dict[str, Any] = {
            "model": self.model,
            "messages": [m.to_chat_dict() for m in self._messages],
        }
        if self._tools:
            params["tools"] = list(self._tools)

        logger.debug(
            "Requesting completion from %s with %d messages", self.model, len(self._messages)
        )
        try:
            completion = await self._client.chat.completions.create(**params)
        except openai.OpenAIError as exc:
            raise classify_transport_error(exc, logger) from exc

        if not isinstance(getattr(completion, "choices", None), list):
            logger.error("Model endpoint returned a malformed completion: %r", completion)
            raise TransportError(
                f"Malformed completion from model endpoint: {type(completion).__name__} "
                "without a choices list"
            )

        self._messages.append(merge_choices(completion))
        return completion
