"""Domain models for signon."""

from signon.models.user import SessionUser, UserRecord

__all__ = [
    "SessionUser",
    "UserRecord",
]
