"""Agent configuration: paths, defaults and environment settings."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .errors import ConfigError

PACKAGE_DIR = Path(__file__).resolve().parent
PROMPTS_DIR = PACKAGE_DIR / "prompts"
DEFAULT_SYSTEM_PROMPT_PATH = PROMPTS_DIR / "system_prompt.md"

DEFAULT_MODEL = "gpt-4.1-nano"
DEFAULT_PROVIDER = "git"
DEFAULT_BRANCH = "main"
DEFAULT_CHECK_INTERVAL_HOURS = 1
DEFAULT_REPORTS_DIR = "reports"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


class AgentSettings(BaseModel):
    """Settings consumed before the agent core is constructed."""

    api_key: str | None = Field(default=None, description="Model endpoint API key.")
    base_url: str | None = Field(
        default=None,
        description="Custom base URL for an OpenAI-compatible endpoint.",
    )
    model: str = Field(default=DEFAULT_MODEL, description="Chat model identifier.")
    provider: str = Field(
        default=DEFAULT_PROVIDER,
        description="Repository provider: git, github, ado or gerrit.",
    )
    github_token: str | None = None
    ado_token: str | None = None
    gerrit_token: str | None = None
    repo_path: str | None = Field(default=None, description="Local repository or remote project.")
    branch: str = DEFAULT_BRANCH
    check_interval_hours: int = Field(default=DEFAULT_CHECK_INTERVAL_HOURS, ge=1)
    reports_dir: str = Field(
        default=DEFAULT_REPORTS_DIR, description="Directory where reports are saved."
    )

    @classmethod
    def from_env(cls, **overrides: object) -> AgentSettings:
        """Load settings from the environment (and a .env file if present)."""
        load_dotenv()
        values: dict[str, object] = {
            "api_key": os.getenv("OPENAI_API_KEY") or None,
            "base_url": os.getenv("OPENAI_BASE_URL") or None,
            "model": os.getenv("OPENAI_MODEL") or DEFAULT_MODEL,
            "provider": (os.getenv("PROVIDER") or DEFAULT_PROVIDER).strip().lower(),
            "github_token": os.getenv("GITHUB_TOKEN") or None,
            "ado_token": os.getenv("ADO_TOKEN") or None,
            "gerrit_token": os.getenv("GERRIT_TOKEN") or None,
            "repo_path": os.getenv("REPO_PATH") or None,
            "branch": os.getenv("BRANCH") or DEFAULT_BRANCH,
            "check_interval_hours": _env_int(
                "CHECK_INTERVAL_HOURS", DEFAULT_CHECK_INTERVAL_HOURS
            ),
            "reports_dir": os.getenv("REPORTS_DIR") or DEFAULT_REPORTS_DIR,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def require_api_key(self) -> str:
        if not self.api_key:
            raise ConfigError("OPENAI_API_KEY environment variable is not set")
        return self.api_key
