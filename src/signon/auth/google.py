"""Google One Tap credential verification.

Google One Tap hands the browser a signed ID token. The browser posts it to
`/auth/callback/google-one-tap` and we verify it server-side against Google's
tokeninfo endpoint, then map its claims to an `AuthUser`.

## Endpoint

- Token info: https://oauth2.googleapis.com/tokeninfo?id_token=<token>

The response carries the token's claims:

```json
{
  "sub": "110169484474386276334",
  "email": "user@example.com",
  "email_verified": "true",
  "given_name": "Ada",
  "family_name": "Lovelace",
  "picture": "https://lh3.googleusercontent.com/..."
}
```

## Failure Handling

`authorize` never raises. Missing configuration, network errors, non-200
responses and unusable payloads are logged and reported as `None`, which
the caller treats as a denied sign-in.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

import httpx

from signon.auth.models import AuthUser
from signon.config import Settings, get_settings

logger = logging.getLogger(__name__)

GOOGLE_TOKENINFO_URL = "https://oauth2.googleapis.com/tokeninfo"


class TokenVerificationError(ValueError):
    """Raised when a Google ID token cannot be verified."""


async def verify_id_token(
    token: str,
    client: httpx.AsyncClient | None = None,
) -> dict[str, Any]:
    """Verify a Google ID token and return its claims.

    Args:
        token: The ID token issued to the browser by Google One Tap
        client: Optional HTTP client (a fresh one is used if omitted)

    Returns:
        The verified claims

    Raises:
        TokenVerificationError: If the request fails or the payload is unusable
    """
    if client is None:
        async with httpx.AsyncClient() as owned_client:
            return await verify_id_token(token, client=owned_client)

    try:
        response = await client.get(GOOGLE_TOKENINFO_URL, params={"id_token": token})
    except httpx.HTTPError as e:
        raise TokenVerificationError(f"Token info request failed: {e}") from e

    if response.status_code != 200:
        logger.debug(f"Token info rejected token: {response.text}")
        raise TokenVerificationError(
            f"Failed to verify token: {response.status_code}"
        )

    try:
        payload = response.json()
    except ValueError as e:
        raise TokenVerificationError("Invalid payload from token") from e

    if not payload or not isinstance(payload, dict):
        raise TokenVerificationError("Invalid payload from token")

    return payload


def _is_verified(value: Any) -> bool:
    """Read a tokeninfo boolean claim, which Google sends as "true"/"false"."""
    if isinstance(value, str):
        return value.lower() == "true"
    return value is True


def user_from_claims(payload: Mapping[str, Any]) -> AuthUser:
    """Map verified Google claims to an `AuthUser`."""
    given_name = payload.get("given_name")
    family_name = payload.get("family_name")

    return AuthUser(
        id=payload.get("sub"),
        name=" ".join(part or "" for part in (given_name, family_name)),
        email=payload["email"],
        image=payload.get("picture"),
        email_verified=(
            datetime.now(timezone.utc)
            if _is_verified(payload.get("email_verified"))
            else None
        ),
    )


async def authorize(
    credentials: Mapping[str, Any] | None,
    *,
    settings: Settings | None = None,
    client: httpx.AsyncClient | None = None,
) -> AuthUser | None:
    """Authorize a Google One Tap sign-in.

    Args:
        credentials: Submitted credentials; `credential` holds the ID token
        settings: Application settings (or the cached ones)
        client: Optional HTTP client for the verification call

    Returns:
        The signed-in user, or None if the sign-in is denied
    """
    settings = settings or get_settings()

    if not settings.google_one_tap_client_id:
        logger.warning("invalid google auth config")
        return None

    token = (credentials or {}).get("credential")
    if not token:
        logger.warning("Missing Google One Tap credential")
        return None

    try:
        payload = await verify_id_token(token, client=client)
    except TokenVerificationError as e:
        logger.warning(f"Google One Tap sign-in denied: {e}")
        return None

    if not payload.get("email"):
        logger.warning("invalid email in payload")
        return None

    return user_from_claims(payload)
