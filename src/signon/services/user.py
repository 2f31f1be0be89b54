"""User persistence.

`save_user` is an idempotent upsert keyed on `(email, signin_provider)`.
The first sign-in inserts the candidate record as given. Later sign-ins
keep the stored `uuid` and `created_at` and refresh everything that can
change between sign-ins (name, avatar, provider subject, client IP).

Database errors are not caught here; the `jwt` callback decides what a
failed save means for the sign-in.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from signon.database.connection import get_db
from signon.database.models import User
from signon.models.user import UserRecord

logger = logging.getLogger(__name__)


def _parse_timestamp(value: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        logger.warning(f"Unparseable created_at {value!r}, using current time")
        return datetime.now(timezone.utc)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _format_timestamp(value: datetime) -> str:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def to_record(user: User) -> UserRecord:
    """Convert a stored user to a `UserRecord`."""
    return UserRecord(
        uuid=user.uuid,
        email=user.email,
        nickname=user.nickname or "",
        avatar_url=user.avatar_url or "",
        signin_type=user.signin_type,
        signin_provider=user.signin_provider,
        signin_openid=user.signin_openid or "",
        created_at=_format_timestamp(user.created_at),
        signin_ip=user.signin_ip or "",
    )


async def _save_user(record: UserRecord, db: AsyncSession) -> UserRecord:
    result = await db.execute(
        select(User).where(
            User.email == record.email,
            User.signin_provider == record.signin_provider,
        )
    )
    user = result.scalar_one_or_none()

    if user:
        # Update existing user, keeping its identity
        user.nickname = record.nickname
        user.avatar_url = record.avatar_url
        user.signin_type = record.signin_type
        user.signin_openid = record.signin_openid
        user.signin_ip = record.signin_ip
        logger.debug(f"Updating user {user.uuid}")
    else:
        user = User(
            uuid=record.uuid,
            email=record.email,
            nickname=record.nickname,
            avatar_url=record.avatar_url,
            signin_type=record.signin_type,
            signin_provider=record.signin_provider,
            signin_openid=record.signin_openid,
            signin_ip=record.signin_ip,
            created_at=_parse_timestamp(record.created_at),
        )
        db.add(user)
        logger.info(f"Creating user {record.email} via {record.signin_provider}")

    await db.commit()
    await db.refresh(user)

    return to_record(user)


async def save_user(record: UserRecord, db: AsyncSession | None = None) -> UserRecord:
    """Insert or update a user.

    Args:
        record: Candidate record built from the sign-in
        db: Session to use (a new one is opened if omitted)

    Returns:
        The persisted record, with the stored uuid and created_at
    """
    if db is not None:
        return await _save_user(record, db)

    async with get_db() as session:
        return await _save_user(record, session)


async def find_user_by_uuid(
    uuid: str, db: AsyncSession | None = None
) -> UserRecord | None:
    """Look up a user by its public uuid."""
    if db is None:
        async with get_db() as session:
            return await find_user_by_uuid(uuid, session)

    result = await db.execute(select(User).where(User.uuid == uuid))
    user = result.scalar_one_or_none()
    return to_record(user) if user else None
