"""OAuth clients for the redirect-based providers.

The OAuth protocol (state, redirects, code exchange, OIDC ID token
validation) is handled by authlib. This module registers one authlib client
per configured OAuth provider and turns what each provider returns into an
`AuthUser` / `Account` pair for the auth callbacks.

## Profiles

- Google (OIDC): claims come from the validated ID token (`userinfo`)
- GitHub: profile from `GET /user`; when the public email is hidden, the
  primary verified address from `GET /user/emails` is used
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any

from authlib.integrations.starlette_client import OAuth, StarletteOAuth2App

from signon.auth.models import Account, AuthUser
from signon.auth.providers import (
    GitHubProvider,
    GoogleProvider,
    OneTapProvider,
    Provider,
    get_providers,
)

logger = logging.getLogger(__name__)


class ProfileError(ValueError):
    """Raised when a provider returns a profile we cannot sign in with."""


def build_oauth(providers: tuple[Provider, ...]) -> OAuth:
    """Register an authlib client for every OAuth provider.

    One Tap is not an OAuth flow and is skipped.
    """
    oauth = OAuth()

    for provider in providers:
        if isinstance(provider, OneTapProvider):
            continue
        oauth.register(name=provider.id, **provider.client_kwargs())
        logger.debug(f"Registered OAuth client: {provider.id}")

    return oauth


@lru_cache
def get_oauth() -> OAuth:
    """Get the cached OAuth registry for the configured providers."""
    return build_oauth(get_providers())


def google_user(token: Mapping[str, Any]) -> AuthUser:
    """Build an `AuthUser` from a Google OIDC token response."""
    userinfo = token.get("userinfo") or {}

    return AuthUser(
        id=str(userinfo.get("sub", "")),
        email=userinfo.get("email"),
        name=userinfo.get("name"),
        image=userinfo.get("picture"),
        email_verified=(
            datetime.now(timezone.utc) if userinfo.get("email_verified") else None
        ),
    )


def github_user(
    profile: Mapping[str, Any],
    emails: list[Mapping[str, Any]] | None = None,
) -> AuthUser:
    """Build an `AuthUser` from a GitHub profile.

    Args:
        profile: Response of `GET /user`
        emails: Response of `GET /user/emails`, used when the profile
            has no public email

    Raises:
        ProfileError: If the profile has no `id`
    """
    if profile.get("id") is None:
        raise ProfileError("GitHub profile has no id")

    email = profile.get("email")
    if not email and emails:
        primary = next(
            (e for e in emails if e.get("primary") and e.get("verified")),
            None,
        )
        email = primary.get("email") if primary else None

    return AuthUser(
        id=str(profile["id"]),
        email=email,
        name=profile.get("name") or profile.get("login"),
        image=profile.get("avatar_url"),
    )


async def fetch_user(
    client: StarletteOAuth2App,
    provider: GoogleProvider | GitHubProvider,
    token: Mapping[str, Any],
) -> tuple[AuthUser, Account]:
    """Resolve the signed-in user after a successful code exchange.

    Args:
        client: The provider's authlib client
        provider: The provider descriptor
        token: Token response from `authorize_access_token`

    Returns:
        The provider user and the account it signed in through

    Raises:
        ProfileError: If the provider's profile response is unusable
    """
    if isinstance(provider, GoogleProvider):
        user = google_user(token)
    else:
        response = await client.get("user", token=token)
        response.raise_for_status()
        try:
            profile = response.json()
        except ValueError as e:
            raise ProfileError("Invalid GitHub profile response") from e

        if not isinstance(profile, dict):
            raise ProfileError("Invalid GitHub profile response")

        emails = None
        if not profile.get("email"):
            response = await client.get("user/emails", token=token)
            if response.status_code == 200:
                try:
                    emails = response.json()
                except ValueError:
                    logger.warning("GitHub email lookup returned invalid JSON")
                if not isinstance(emails, list):
                    emails = None
            else:
                logger.warning(f"GitHub email lookup failed: {response.status_code}")

        user = github_user(profile, emails)

    account = Account(
        type=provider.type,
        provider=provider.id,
        provider_account_id=user.id,
    )
    return user, account
