"""FastAPI dependencies for authentication.

These dependencies can be used in route handlers to read the session
token and require a signed-in user.

## Usage

```python
from fastapi import Depends
from signon.auth import get_current_user
from signon.models import UserRecord

@app.get("/profile")
async def get_profile(user: UserRecord = Depends(get_current_user)):
    return {"email": user.email, "nickname": user.nickname}
```
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import Depends, HTTPException, Request, status

from signon.auth.session import verify_session_token
from signon.config import get_settings
from signon.models.user import UserRecord
from signon.services.user import find_user_by_uuid

logger = logging.getLogger(__name__)


async def get_session_token(request: Request) -> dict[str, Any] | None:
    """Extract and verify the session token from its cookie.

    Returns None if no session or invalid session.
    """
    settings = get_settings()

    session_cookie = request.cookies.get(settings.session_cookie_name)
    if not session_cookie:
        return None

    return verify_session_token(session_cookie)


async def get_current_user_optional(
    token: dict[str, Any] | None = Depends(get_session_token),
) -> UserRecord | None:
    """Get the stored user for the current session, or None.

    Sessions whose user could not be persisted at sign-in carry no user
    projection and resolve to None.
    """
    if not token or not token.get("user"):
        return None

    user_uuid = token["user"].get("uuid")
    if not user_uuid:
        return None

    user = await find_user_by_uuid(user_uuid)
    if user is None:
        logger.warning(f"Session for non-existent user: {user_uuid}")

    return user


async def get_current_user(
    user: UserRecord | None = Depends(get_current_user_optional),
) -> UserRecord:
    """Get the current authenticated user.

    Raises 401 if not authenticated.
    """
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    return user
