"""
Exception hierarchy for the agent core.

Setup and transport errors end a run; per-tool-call errors are converted into
tool results by the agent loop so the model can react to them.
"""

from __future__ import annotations

import logging
from typing import Final, Type

import openai

__all__: tuple[str, ...] = (
    "AgentError",
    "ConfigError",
    "TransportError",
    "AuthenticationError",
    "ArgumentParseError",
    "UnknownToolError",
    "ToolExecutionError",
    "DuplicateToolError",
    "classify_transport_error",
)


class AgentError(Exception):
    """Base class for all agent errors."""


class ConfigError(AgentError):
    """A required setting is missing or invalid."""


class TransportError(AgentError):
    """The model endpoint call failed.

    Attributes:
        original_exc: The underlying SDK exception, or None when the endpoint
            answered with a payload that is not a usable completion.
    """

    original_exc: Exception | None

    def __init__(self, message: str, original_exc: Exception | None = None) -> None:
        super().__init__(message)
        self.original_exc = original_exc
        self.__cause__ = original_exc


class AuthenticationError(AgentError):
    """Credential acquisition failed before the run started."""


class ArgumentParseError(AgentError):
    """A tool call's argument payload is not a valid JSON object."""


class UnknownToolError(AgentError):
    """The model requested a tool that is not registered."""


class ToolExecutionError(AgentError):
    """A tool handler failed."""


class DuplicateToolError(AgentError):
    """A tool with the same name is already registered."""


RATE_LIMIT_ERRORS: Final[tuple[Type[Exception], ...]] = (openai.RateLimitError,)

CONN_ERRORS: Final[tuple[Type[Exception], ...]] = (openai.APIConnectionError,)

STATUS_ERRORS: Final[tuple[Type[Exception], ...]] = (openai.APIStatusError,)


def classify_transport_error(
    exc: Exception,
    logger: logging.Logger | None = None,
) -> TransportError:
    """Wrap an SDK exception in TransportError with a concise message."""
    log = logger or logging.getLogger(__name__)

    if isinstance(exc, RATE_LIMIT_ERRORS):
        msg = "Rate limit exceeded"
    elif isinstance(exc, CONN_ERRORS):
        msg = "Connection problem, unable to reach the model endpoint"
    elif isinstance(exc, STATUS_ERRORS):
        msg = f"Model endpoint returned status {getattr(exc, 'status_code', 'unknown')}"
    elif isinstance(exc, openai.APIError):
        msg = "Model endpoint reported an error"
    else:
        msg = exc.__class__.__name__

    log.error("Model request failed: %s: %s", msg, exc)
    return TransportError(f"{msg}: {exc}", exc)
