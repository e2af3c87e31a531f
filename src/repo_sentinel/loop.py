"""Main agent-tool loop orchestrator."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from openai import AsyncOpenAI
from openai.types.chat import ChatCompletion

from .config import DEFAULT_MODEL
from .errors import AgentError, ConfigError
from .hooks import AgentHooks
from .llm import create_openai_client
from .models import AgentResult, ToolCallRequest, ToolOutcome
from .registry import ToolRegistry
from .session import ConversationSession

logger = logging.getLogger(__name__)


class AgentState(str, Enum):
    AWAITING_MODEL = "awaiting_model"
    EXECUTING_TOOLS = "executing_tools"
    DONE = "done"


@dataclass
class AgentOptions:
    """Options for one agent run."""

    registry: ToolRegistry
    model: str = DEFAULT_MODEL
    system_prompt: str | None = None
    api_key: str | None = None
    base_url: str | None = None
    hooks: AgentHooks | None = None


def collect_tool_calls(completion: ChatCompletion) -> list[ToolCallRequest]:
    """Function tool calls from every choice, in choice order. Other call kinds are skipped."""
    requests: list[ToolCallRequest] = []
    for choice in completion.choices:
        for tc in choice.message.tool_calls or []:
            if tc.type != "function":
                logger.debug("Skipping non-function tool call %s (%s)", tc.id, tc.type)
                continue
            requests.append(ToolCallRequest.from_openai(tc))
    return requests


async def run_tool_call(
    registry: ToolRegistry,
    request: ToolCallRequest,
    hooks: AgentHooks,
) -> ToolOutcome:
    """Execute one tool call. Never raises: failures become an error outcome."""
    hooks.fire("tool_start", request.name, request.id, request.arguments)
    try:
        output = await registry.execute(request.name, request.arguments)
    except AgentError as exc:
        message = str(exc)
        hooks.fire("tool_error", request.name, request.id, message)
        return ToolOutcome(request=request, error=message)
    except Exception as exc:
        logger.exception("Unexpected failure in tool %s (%s)", request.name, request.id)
        message = str(exc) or exc.__class__.__name__
        hooks.fire("tool_error", request.name, request.id, message)
        return ToolOutcome(request=request, error=message)
    hooks.fire("tool_end", request.name, request.id, output)
    return ToolOutcome(request=request, output=output)


async def execute_tool_calls(
    registry: ToolRegistry,
    requests: Sequence[ToolCallRequest],
    hooks: AgentHooks | None = None,
) -> list[ToolOutcome]:
    """Run all requests concurrently and wait until every one has settled."""
    hooks = hooks or AgentHooks()
    return list(
        await asyncio.gather(*(run_tool_call(registry, r, hooks) for r in requests))
    )


class AgentLoop:
    """
    Drives a ConversationSession and a ToolRegistry until the model stops
    asking for tools.

    AWAITING_MODEL -> EXECUTING_TOOLS -> AWAITING_MODEL -> ... -> DONE

    Transport errors from the session propagate and end the run; tool errors
    are answered with ``{"error": ...}`` results and the run continues.
    """

    def __init__(
        self,
        session: ConversationSession,
        registry: ToolRegistry,
        hooks: AgentHooks | None = None,
    ) -> None:
        self.session = session
        self.registry = registry
        self.hooks = hooks or AgentHooks()
        self.state = AgentState.AWAITING_MODEL
        self.rounds = 0
        self._contents: list[str] = []
        self._outcomes: list[ToolOutcome] = []

    def _emit_content(self, completion: ChatCompletion) -> None:
        for choice in completion.choices:
            if choice.message.content:
                self._contents.append(choice.message.content)
                self.hooks.fire("content", choice.message.content)

    async def run(self, user_prompt: str) -> AgentResult:
        self.state = AgentState.AWAITING_MODEL
        completion = await self.session.chat(user_prompt)
        self.rounds += 1

        while True:
            self._emit_content(completion)
            if not ConversationSession.requires_tool_call(completion):
                break

            self.state = AgentState.EXECUTING_TOOLS
            requests = collect_tool_calls(completion)
            logger.debug("Round %d: executing %d tool calls", self.rounds, len(requests))
            outcomes = await execute_tool_calls(self.registry, requests, self.hooks)
            self._outcomes.extend(outcomes)

            self.state = AgentState.AWAITING_MODEL
            completion = await self.session.submit_tool_results(
                [outcome.to_result() for outcome in outcomes]
            )
            self.rounds += 1

        self.state = AgentState.DONE
        logger.info(
            "Agent finished after %d rounds and %d tool calls", self.rounds, len(self._outcomes)
        )
        return AgentResult(
            content="\n".join(self._contents),
            rounds=self.rounds,
            messages=self.session.get_messages(),
            tool_outcomes=list(self._outcomes),
        )


async def run_agent(
    options: AgentOptions,
    user_prompt: str,
    *,
    client: AsyncOpenAI | None = None,
) -> AgentResult:
    """
    Run one isolated agent conversation and return the final result.

    A fresh session is created and discarded afterwards, so nothing carries
    over between runs. When ``client`` is omitted one is built from
    ``options.api_key`` / ``options.base_url`` and closed at the end.
    """
    owns_client = client is None
    if client is None:
        if not options.api_key:
            raise ConfigError("An API key is required when no client is supplied")
        client = create_openai_client(options.api_key, options.base_url)

    session = ConversationSession(
        client,
        options.model,
        system_prompt=options.system_prompt,
        tools=options.registry.get_tool_definitions(),
    )
    loop = AgentLoop(session, options.registry, options.hooks)
    logger.info("Starting agent run with model %s and %d tools", options.model, len(options.registry))
    try:
        return await loop.run(user_prompt)
    finally:
        if owns_client:
            await client.close()
