"""Sign-in provider registry.

The registry is an ordered, immutable tuple of provider descriptors built
once from settings. Each supported sign-in method has its own descriptor
type:

- `OneTapProvider`: Google One Tap; a Google ID token is posted back and
  verified server-side (see `signon.auth.google`)
- `GoogleProvider`: Google OAuth / OpenID Connect
- `GitHubProvider`: GitHub OAuth

A method is only registered when its feature flag is on and its
credentials are set. Missing configuration never raises; the method is
just absent. Registration order is One Tap, Google, GitHub.

`provider_map` is the public projection used to render sign-in buttons. It
never includes One Tap, which has its own prompt rather than a button.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Union

from signon.config import Settings, get_settings

logger = logging.getLogger(__name__)

GOOGLE_ONE_TAP_ID = "google-one-tap"

GOOGLE_DISCOVERY_URL = "https://accounts.google.com/.well-known/openid-configuration"
GITHUB_AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"
GITHUB_API_BASE_URL = "https://api.github.com/"


@dataclass(frozen=True)
class OneTapProvider:
    """Google One Tap credential provider."""

    client_id: str
    id: str = GOOGLE_ONE_TAP_ID
    name: str = GOOGLE_ONE_TAP_ID
    type: str = "credentials"
    credentials: dict[str, dict[str, str]] = field(
        default_factory=lambda: {"credential": {"type": "text"}},
        hash=False,
        compare=False,
    )


@dataclass(frozen=True)
class GoogleProvider:
    """Google OpenID Connect provider."""

    client_id: str
    client_secret: str = field(repr=False)
    id: str = "google"
    name: str = "Google"
    type: str = "oidc"
    scope: str = "openid email profile"

    def client_kwargs(self) -> dict[str, Any]:
        """Arguments for registering this provider with authlib."""
        return {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "server_metadata_url": GOOGLE_DISCOVERY_URL,
            "client_kwargs": {"scope": self.scope},
        }


@dataclass(frozen=True)
class GitHubProvider:
    """GitHub OAuth provider."""

    client_id: str
    client_secret: str = field(repr=False)
    id: str = "github"
    name: str = "GitHub"
    type: str = "oauth"
    scope: str = "read:user user:email"

    def client_kwargs(self) -> dict[str, Any]:
        """Arguments for registering this provider with authlib."""
        return {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "authorize_url": GITHUB_AUTHORIZE_URL,
            "access_token_url": GITHUB_TOKEN_URL,
            "api_base_url": GITHUB_API_BASE_URL,
            "client_kwargs": {"scope": self.scope},
        }


Provider = Union[OneTapProvider, GoogleProvider, GitHubProvider]
OAuthProvider = Union[GoogleProvider, GitHubProvider]


@dataclass(frozen=True)
class ProviderInfo:
    """Public-safe view of a provider: enough to render a sign-in button."""

    id: str
    name: str


def build_providers(settings: Settings) -> tuple[Provider, ...]:
    """Build the provider registry from settings.

    Args:
        settings: Application settings

    Returns:
        Providers in registration order (One Tap, Google, GitHub)
    """
    providers: list[Provider] = []

    if settings.google_one_tap_configured:
        providers.append(OneTapProvider(client_id=settings.google_one_tap_client_id))

    if settings.google_oauth_configured:
        providers.append(
            GoogleProvider(
                client_id=settings.google_client_id,
                client_secret=settings.google_client_secret,
            )
        )

    if settings.github_oauth_configured:
        providers.append(
            GitHubProvider(
                client_id=settings.github_client_id,
                client_secret=settings.github_client_secret,
            )
        )

    logger.debug(f"Registered providers: {[p.id for p in providers]}")
    return tuple(providers)


def provider_map(providers: tuple[Provider, ...]) -> tuple[ProviderInfo, ...]:
    """Project providers to `{id, name}` pairs, leaving out One Tap."""
    return tuple(
        ProviderInfo(id=provider.id, name=provider.name)
        for provider in providers
        if provider.id != GOOGLE_ONE_TAP_ID
    )


def find_provider(
    providers: tuple[Provider, ...], provider_id: str
) -> Provider | None:
    """Look up a registered provider by id."""
    for provider in providers:
        if provider.id == provider_id:
            return provider
    return None


@lru_cache
def get_providers() -> tuple[Provider, ...]:
    """Get the process-wide provider registry."""
    return build_providers(get_settings())


@lru_cache
def get_provider_map() -> tuple[ProviderInfo, ...]:
    """Get the process-wide public provider map."""
    return provider_map(get_providers())
