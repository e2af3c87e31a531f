"""Provider toolsets: credential retrieval and agent configuration tools."""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from ..config import AgentSettings
from ..credentials import CredentialStore, Credentials, Provider, parse_provider
from ..reports import calculate_fetch_hours, save_report
from .base import BaseTool


class GetTokenTool(BaseTool):
    """Returns the cached token of one provider so the model can pass it to API tools."""

    def __init__(self, store: CredentialStore) -> None:
        self._store = store

    @property
    def name(self) -> str:
        return f"get_{self._store.provider.value}_token"

    @property
    def description(self) -> str:
        label = self._store.provider.display_name
        return (
            f"Get the {label} authentication token.\n\n"
            f"Use this token as the 'token' parameter for all {label} API tools.\n\n"
            f"Returns: The {label} access token string."
        )

    async def execute(self, params: dict[str, Any]) -> str:
        token = self._store.get()
        if not token:
            raise RuntimeError(f"{self._store.provider.display_name} token not available")
        return token


class GetConfigTool(BaseTool):
    """Returns the repository configuration the agent should analyze."""

    def __init__(self, settings: AgentSettings) -> None:
        self._settings = settings

    @property
    def name(self) -> str:
        return "get_config"

    @property
    def description(self) -> str:
        return (
            "Get the repository configuration for this run: provider, repository "
            "path or project, branch, and how many hours of history to check. "
            "fetchHours covers the time since the last saved report, capped at "
            "checkIntervalHours.\n\n"
            "Returns: JSON object with the configuration."
        )

    async def execute(self, params: dict[str, Any]) -> str:
        s = self._settings
        if not s.repo_path:
            raise RuntimeError("REPO_PATH environment variable is not set")
        return json.dumps(
            {
                "provider": s.provider,
                "repoPath": s.repo_path,
                "branch": s.branch,
                "checkIntervalHours": s.check_interval_hours,
                "fetchHours": calculate_fetch_hours(
                    Path(s.reports_dir), s.check_interval_hours
                ),
            }
        )


class SaveReportTool(BaseTool):
    """Persists the finished Markdown report; its timestamp sets the next run's window."""

    def __init__(self, settings: AgentSettings) -> None:
        self._reports_dir = Path(settings.reports_dir)

    @property
    def name(self) -> str:
        return "save_report"

    @property
    def description(self) -> str:
        return (
            "Save the final Markdown report. Call this once, after the analysis "
            "is complete.\n\n"
            "Returns: The path of the saved report file."
        )

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "content": {
                    "type": "string",
                    "description": "The full report in Markdown.",
                }
            },
            "required": ["content"],
        }

    async def execute(self, params: dict[str, Any]) -> str:
        content = params.get("content")
        if not isinstance(content, str) or not content.strip():
            raise ValueError("content must be a non-empty string")
        path = save_report(self._reports_dir, content)
        return f"Report saved to {path}"


def build_provider_tools(
    provider: Provider | str,
    credentials: Credentials,
    settings: AgentSettings,
    extra_tools: Iterable[BaseTool] | None = None,
) -> list[BaseTool]:
    """
    Tool set for one provider.

    Every provider gets ``get_config`` and ``save_report``; token-based
    providers also get their ``get_<provider>_token`` tool. Provider API
    tools are supplied by the caller through ``extra_tools``.
    """
    provider = parse_provider(provider)
    tools: list[BaseTool] = [GetConfigTool(settings), SaveReportTool(settings)]
    if provider.needs_token:
        tools.append(GetTokenTool(credentials.for_provider(provider)))
    tools.extend(extra_tools or ())
    return tools
