"""User models shared by the auth callbacks and the persistence layer."""

from __future__ import annotations

from pydantic import BaseModel, Field


class SessionUser(BaseModel):
    """The reduced user projection carried in the session token.

    This is what `token["user"]` holds after a successful sign-in and what
    the session endpoint hands back to clients.
    """

    uuid: str
    email: str
    nickname: str = ""
    avatar_url: str = ""
    created_at: str = ""


class UserRecord(BaseModel):
    """A local user record.

    Built from provider claims on sign-in and handed to `save_user`, which
    returns the persisted version. `uuid` and `created_at` are only
    candidate values: an existing user keeps the ones already stored.
    """

    uuid: str
    email: str
    nickname: str = ""
    avatar_url: str = ""
    signin_type: str = Field(..., description="credentials, oauth or oidc")
    signin_provider: str = Field(..., description="Provider id, e.g. github")
    signin_openid: str = Field(default="", description="Subject id at the provider")
    created_at: str = Field(..., description="ISO-8601 creation time")
    signin_ip: str = ""

    def to_session_user(self) -> SessionUser:
        """Project the record down to what the session token carries."""
        return SessionUser(
            uuid=self.uuid,
            email=self.email,
            nickname=self.nickname,
            avatar_url=self.avatar_url,
            created_at=self.created_at,
        )
