"""RepoSentinel run: settings -> credentials -> tool registry -> agent loop."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from openai import AsyncOpenAI

from .config import AgentSettings
from .credentials import Credentials, bootstrap_credentials, parse_provider
from .hooks import AgentHooks, LoggingHooks
from .loop import AgentOptions, run_agent
from .models import AgentResult
from .registry import ToolRegistry
from .system_prompt_loader import build_user_prompt, get_default_system_prompt
from .tools.base import BaseTool
from .tools.providers import build_provider_tools

logger = logging.getLogger(__name__)


def create_tool_registry(
    settings: AgentSettings,
    credentials: Credentials,
    extra_tools: Iterable[BaseTool] | None = None,
) -> ToolRegistry:
    """Registry for the configured provider. Duplicate names fail here, before any run."""
    registry = ToolRegistry()
    registry.register_all(
        build_provider_tools(settings.provider, credentials, settings, extra_tools)
    )
    return registry


async def run_repo_sentinel(
    settings: AgentSettings,
    *,
    user_prompt: str | None = None,
    system_prompt: str | None = None,
    extra_tools: Iterable[BaseTool] | None = None,
    hooks: AgentHooks | None = None,
    client: AsyncOpenAI | None = None,
) -> AgentResult:
    """Run the repository analysis agent once with the given settings."""
    provider = parse_provider(settings.provider)
    credentials = bootstrap_credentials(settings, provider)
    try:
        registry = create_tool_registry(settings, credentials, extra_tools)
        options = AgentOptions(
            registry=registry,
            model=settings.model,
            system_prompt=system_prompt or get_default_system_prompt() or None,
            api_key=settings.api_key if client is not None else settings.require_api_key(),
            base_url=settings.base_url,
            hooks=hooks or LoggingHooks(),
        )
        logger.info("Starting RepoSentinel agent for provider %s", provider.value)
        return await run_agent(options, user_prompt or build_user_prompt(), client=client)
    finally:
        credentials.clear()
