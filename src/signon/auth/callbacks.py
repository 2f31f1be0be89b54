"""Auth lifecycle callbacks and the assembled auth configuration.

The sign-in routes call these hooks at fixed points:

1. `sign_in`: decide whether a provider-authenticated user may proceed
2. `jwt`: enrich the session token; on first sign-in, upsert the local user
3. `redirect`: decide where to send the browser afterwards
4. `session`: shape the session object returned to clients

None of the hooks raise. Persistence problems degrade the session instead
of failing the sign-in, and untrusted redirect targets fall back to the
application base URL.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any
from urllib.parse import urlsplit

from starlette.requests import Request

from signon.auth.models import Account, AuthUser
from signon.auth.providers import Provider, ProviderInfo, get_providers, provider_map
from signon.models.user import UserRecord
from signon.services.user import save_user as save_user_record
from signon.utils import get_client_ip, get_iso_timestr, get_uuid

logger = logging.getLogger(__name__)

SIGN_IN_PAGE = "/auth/signin"

SaveUser = Callable[[UserRecord], Awaitable[UserRecord]]

_DEFAULT_PORTS = {"http": 80, "https": 443}


async def sign_in(
    user: AuthUser,
    account: Account | None,
    profile: dict[str, Any] | None = None,
    email: dict[str, Any] | None = None,
    credentials: dict[str, Any] | None = None,
) -> bool | str:
    """Decide whether a user may sign in.

    Returns True to proceed, False to deny with a generic error, or a URL
    to redirect the user to instead.
    """
    return True


def _origin(url: str) -> str | None:
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError:
        return None

    if not parts.scheme or not parts.hostname:
        return None

    scheme = parts.scheme.lower()
    origin = f"{scheme}://{parts.hostname.lower()}"
    if port is not None and port != _DEFAULT_PORTS.get(scheme):
        origin += f":{port}"
    return origin


async def redirect(url: str, base_url: str) -> str:
    """Resolve a post-sign-in redirect target.

    Relative paths are resolved against `base_url`, absolute URLs are only
    followed when they share its origin, and everything else is replaced
    by `base_url`.
    """
    if url.startswith("/"):
        return f"{base_url}{url}"

    origin = _origin(url)
    if origin is not None and origin == _origin(base_url):
        return url

    return base_url


async def session(
    session: dict[str, Any],
    token: dict[str, Any] | None,
    user: AuthUser | None = None,
) -> dict[str, Any]:
    """Expose the user projection stored in the token on the session."""
    if token and token.get("user"):
        return {**session, "user": token["user"]}
    return session


async def jwt(
    token: dict[str, Any],
    user: AuthUser | None = None,
    account: Account | None = None,
    *,
    request: Request | None = None,
    save_user: SaveUser = save_user_record,
) -> dict[str, Any]:
    """Enrich the session token.

    On the first call of a sign-in (`user` and `account` present) the user
    is upserted locally and its projection stored under `token["user"]`.
    Later calls for the same session leave the token as it is.

    Args:
        token: Current token claims
        user: The provider user, only present on sign-in
        account: The provider account, only present on sign-in
        request: The sign-in request, used to record the client IP
        save_user: Persistence hook for the user record

    Returns:
        The token; never raises
    """
    try:
        if user and user.email and account:
            db_user = UserRecord(
                uuid=get_uuid(),
                email=user.email,
                nickname=user.name or "",
                avatar_url=user.image or "",
                signin_type=account.type,
                signin_provider=account.provider,
                signin_openid=account.provider_account_id or "",
                created_at=get_iso_timestr(),
                signin_ip=get_client_ip(request),
            )

            try:
                saved_user = await save_user(db_user)
                token["user"] = saved_user.to_session_user().model_dump()
            except Exception:
                logger.exception(f"save user failed: {db_user.email}")

        return token
    except Exception:
        logger.exception("jwt callback error")
        return token


@dataclass(frozen=True)
class AuthCallbacks:
    """Named lifecycle hooks invoked by the sign-in routes."""

    sign_in: Callable[..., Awaitable[bool | str]] = sign_in
    redirect: Callable[[str, str], Awaitable[str]] = redirect
    session: Callable[..., Awaitable[dict[str, Any]]] = session
    jwt: Callable[..., Awaitable[dict[str, Any]]] = jwt


@dataclass(frozen=True)
class AuthConfig:
    """Everything the sign-in routes need: providers, pages and callbacks."""

    providers: tuple[Provider, ...]
    provider_map: tuple[ProviderInfo, ...]
    callbacks: AuthCallbacks = field(default_factory=AuthCallbacks)
    pages: dict[str, str] = field(
        default_factory=lambda: {"sign_in": SIGN_IN_PAGE},
        hash=False,
        compare=False,
    )


def build_auth_config(providers: tuple[Provider, ...]) -> AuthConfig:
    """Assemble the auth configuration for a provider registry."""
    return AuthConfig(providers=providers, provider_map=provider_map(providers))


@lru_cache
def get_auth_config() -> AuthConfig:
    """Get the process-wide auth configuration."""
    return build_auth_config(get_providers())
