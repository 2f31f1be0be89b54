"""Database models for signon.

## Schema Overview

```
users
  uuid            public user id, stable across sign-ins
  email           with signin_provider, the identity a sign-in is keyed on
  signin_*        how the user last signed in
  created_at      first sign-in
```

A person who signs in with both Google and GitHub under the same email
gets one row per provider.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models."""


class User(Base):
    """User account model.

    Rows are created on first sign-in through any provider and refreshed
    on every later sign-in with the same email and provider.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uuid: Mapped[str] = mapped_column(String(36), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    nickname: Mapped[str] = mapped_column(String(255), default="")
    avatar_url: Mapped[str] = mapped_column(String(512), default="")

    # Sign-in method
    signin_type: Mapped[str] = mapped_column(String(32), nullable=False)
    signin_provider: Mapped[str] = mapped_column(String(32), nullable=False)
    signin_openid: Mapped[str] = mapped_column(String(255), default="")
    signin_ip: Mapped[str] = mapped_column(String(64), default="")

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        UniqueConstraint("email", "signin_provider", name="uq_users_email_provider"),
        Index("ix_users_email", "email"),
    )

    def __repr__(self) -> str:
        return f"<User {self.email} via {self.signin_provider}>"
