"""Session tokens as signed JWTs.

The session token is the artifact that carries authentication state across
requests. It is stored in an HTTP-only cookie and holds whatever claims
the `jwt` callback produced, most importantly the `user` projection
attached on sign-in.

## Security

- Tokens are signed with the application secret key
- Tokens expire after a configurable period (default: 30 days)
- Cookies are HTTP-only, SameSite=Lax, and Secure in production

## Token Structure

```json
{
  "sub": "110169484474386276334",
  "name": "Ada Lovelace",
  "email": "ada@example.com",
  "picture": "https://...",
  "user": {"uuid": "...", "email": "...", "nickname": "...", "avatar_url": "...", "created_at": "..."},
  "iat": 1234567890,
  "exp": 1237159890,
  "type": "session"
}
```
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from signon.config import get_settings

logger = logging.getLogger(__name__)

# JWT configuration
ALGORITHM = "HS256"
TOKEN_TYPE = "session"


def create_session_token(
    claims: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Sign a session token carrying the given claims.

    Args:
        claims: Token contents from the `jwt` callback
        expires_delta: Custom expiration time (or use default from settings)

    Returns:
        Signed JWT token string
    """
    settings = get_settings()

    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(seconds=settings.session_max_age_seconds)

    expires_at = now + expires_delta

    payload = {
        **claims,
        "iat": int(now.timestamp()),
        "exp": int(expires_at.timestamp()),
        "type": TOKEN_TYPE,
    }

    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM)


def verify_session_token(token: str) -> dict[str, Any] | None:
    """Verify and decode a session token.

    Args:
        token: The JWT token string

    Returns:
        The token claims if valid, None if invalid or expired
    """
    settings = get_settings()

    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[ALGORITHM],
        )
    except JWTError as e:
        logger.debug(f"Session token verification failed: {e}")
        return None

    if payload.get("type") != TOKEN_TYPE:
        logger.debug("Invalid token type")
        return None

    if "exp" not in payload:
        logger.debug("Session token has no expiry")
        return None

    return payload


def token_expires_at(payload: dict[str, Any]) -> datetime:
    """Expiry of a verified token as an aware datetime."""
    return datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
