"""Observability callbacks fired by the agent loop."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)

# Longest tool output echoed at DEBUG level.
MAX_OUTPUT_LOG = 1000


@dataclass
class AgentHooks:
    """
    Optional callbacks around the agent loop.

    on_tool_start(name, call_id, raw_arguments)
    on_tool_end(name, call_id, output)
    on_tool_error(name, call_id, error_message)
    on_content(text)

    Hooks only observe; their return values are ignored and exceptions they
    raise are logged and dropped.
    """

    on_tool_start: Optional[Callable[[str, str, str], None]] = None
    on_tool_end: Optional[Callable[[str, str, str], None]] = None
    on_tool_error: Optional[Callable[[str, str, str], None]] = None
    on_content: Optional[Callable[[str], None]] = None

    def fire(self, event: str, *args: str) -> None:
        callback = getattr(self, f"on_{event}", None)
        if callback is None:
            return
        try:
            callback(*args)
        except Exception:
            logger.exception("Hook on_%s raised", event)


class LoggingHooks(AgentHooks):
    """Hooks that write tool and assistant events to a logger."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logging.getLogger("repo_sentinel.agent")
        super().__init__(
            on_tool_start=self._tool_start,
            on_tool_end=self._tool_end,
            on_tool_error=self._tool_error,
            on_content=self._content,
        )

    def _tool_start(self, name: str, call_id: str, raw_arguments: str) -> None:
        self._log.info("[TOOL] --- %s (%s) ---", name, call_id)
        self._log.info("[TOOL] Input: %s", raw_arguments)

    def _tool_end(self, name: str, call_id: str, output: str) -> None:
        if self._log.isEnabledFor(logging.DEBUG):
            shown = output if len(output) <= MAX_OUTPUT_LOG else output[:MAX_OUTPUT_LOG] + "..."
            self._log.debug("[TOOL] Output: %s", shown)
        self._log.info("[TOOL] --- End %s (%s) ---", name, call_id)

    def _tool_error(self, name: str, call_id: str, error: str) -> None:
        self._log.warning("[TOOL] Error: %s", error)
        self._log.info("[TOOL] --- End %s (%s) ---", name, call_id)

    def _content(self, text: str) -> None:
        self._log.info("[ASSISTANT] %s", text)
