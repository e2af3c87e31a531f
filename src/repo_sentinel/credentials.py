"""Per-run credential slots for repository providers."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass, field
from enum import Enum

from .config import AgentSettings
from .errors import AuthenticationError

logger = logging.getLogger(__name__)


class Provider(str, Enum):
    GIT = "git"
    GITHUB = "github"
    ADO = "ado"
    GERRIT = "gerrit"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def needs_token(self) -> bool:
        return self is not Provider.GIT


_DISPLAY_NAMES: dict[Provider, str] = {
    Provider.GIT: "Git",
    Provider.GITHUB: "GitHub",
    Provider.ADO: "Azure DevOps",
    Provider.GERRIT: "Gerrit",
}


def parse_provider(value: str | Provider) -> Provider:
    if isinstance(value, Provider):
        return value
    try:
        return Provider(value.strip().lower())
    except ValueError as exc:
        choices = ", ".join(p.value for p in Provider)
        raise ValueError(f"Unknown provider {value!r} (expected one of: {choices})") from exc


class CredentialStore:
    """
    Single-slot holder for one bearer token.

    The value is kept base64-encoded so the plain token does not sit in an
    obvious attribute. This is obfuscation only, not protection.
    """

    def __init__(self, provider: Provider) -> None:
        self.provider = provider
        self._encoded: str | None = None

    def __repr__(self) -> str:
        state = "set" if self.is_set else "empty"
        return f"CredentialStore(provider={self.provider.value!r}, {state})"

    @property
    def is_set(self) -> bool:
        return self._encoded is not None

    def set(self, value: str) -> None:
        if not value:
            raise ValueError("credential must be a non-empty string")
        self._encoded = base64.b64encode(value.encode("utf-8")).decode("ascii")

    def get(self) -> str | None:
        if self._encoded is None:
            return None
        return base64.b64decode(self._encoded).decode("utf-8")

    def clear(self) -> None:
        self._encoded = None


@dataclass
class Credentials:
    """One credential store per token-based provider, scoped to a single run."""

    github: CredentialStore = field(default_factory=lambda: CredentialStore(Provider.GITHUB))
    ado: CredentialStore = field(default_factory=lambda: CredentialStore(Provider.ADO))
    gerrit: CredentialStore = field(default_factory=lambda: CredentialStore(Provider.GERRIT))

    def for_provider(self, provider: Provider) -> CredentialStore:
        if provider is Provider.GIT:
            raise ValueError("the git provider does not use a credential")
        return getattr(self, provider.value)

    def clear(self) -> None:
        self.github.clear()
        self.ado.clear()
        self.gerrit.clear()


def bootstrap_credentials(settings: AgentSettings, provider: Provider | str) -> Credentials:
    """
    Fill a fresh Credentials bundle from settings.

    Raises AuthenticationError when the selected provider needs a token and
    none is configured, so the run fails before any model call.
    """
    provider = parse_provider(provider)
    credentials = Credentials()
    tokens = {
        Provider.GITHUB: settings.github_token,
        Provider.ADO: settings.ado_token,
        Provider.GERRIT: settings.gerrit_token,
    }
    for prov, token in tokens.items():
        if token:
            credentials.for_provider(prov).set(token)

    if provider.needs_token and not credentials.for_provider(provider).is_set:
        raise AuthenticationError(f"No {provider.display_name} token configured")

    logger.debug("Credentials ready for provider %s", provider.value)
    return credentials
