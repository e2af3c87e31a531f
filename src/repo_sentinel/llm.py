"""Model endpoint client construction."""

from __future__ import annotations

from openai import AsyncOpenAI

from .config import AgentSettings

DEFAULT_TIMEOUT = 120.0


def create_openai_client(
    api_key: str,
    base_url: str | None = None,
    *,
    timeout: float = DEFAULT_TIMEOUT,
) -> AsyncOpenAI:
    """Build an AsyncOpenAI client; base_url selects an OpenAI-compatible endpoint.

    SDK-level retries are disabled: transport failures end the run.
    """
    kwargs: dict[str, object] = {"api_key": api_key, "timeout": timeout, "max_retries": 0}
    if base_url:
        kwargs["base_url"] = base_url
    return AsyncOpenAI(**kwargs)


def client_from_settings(settings: AgentSettings) -> AsyncOpenAI:
    return create_openai_client(settings.require_api_key(), settings.base_url)
