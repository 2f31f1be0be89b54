"""Shapes passed between sign-in providers and the auth callbacks."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass
class AuthUser:
    """A user as reported by a provider, before it is mapped to a local record."""

    id: str
    email: str | None
    name: str | None = None
    image: str | None = None
    email_verified: datetime | None = None


@dataclass
class Account:
    """The provider account a sign-in came through."""

    type: str  # credentials, oauth, oidc
    provider: str
    provider_account_id: str
