"""Tests for user persistence."""

import pytest
from sqlalchemy import func, select

from signon.database.models import User
from signon.models.user import UserRecord
from signon.services.user import find_user_by_uuid, save_user


def make_record(**overrides) -> UserRecord:
    values = {
        "uuid": "8d3c5a8e-8f7e-4a51-9d0b-3b3b2b8d9c01",
        "email": "octocat@example.com",
        "nickname": "The Octocat",
        "avatar_url": "https://avatars.githubusercontent.com/u/583231",
        "signin_type": "oauth",
        "signin_provider": "github",
        "signin_openid": "583231",
        "created_at": "2024-03-01T12:00:00+00:00",
        "signin_ip": "198.51.100.1",
    }
    values.update(overrides)
    return UserRecord(**values)


async def count_users(db) -> int:
    result = await db.execute(select(func.count()).select_from(User))
    return result.scalar_one()


@pytest.mark.asyncio
class TestSaveUser:
    """Tests for the user upsert."""

    async def test_first_sign_in_inserts(self, db_session):
        record = make_record()

        saved = await save_user(record, db=db_session)

        assert saved.uuid == record.uuid
        assert saved.email == record.email
        assert saved.nickname == "The Octocat"
        assert saved.signin_ip == "198.51.100.1"
        assert saved.created_at.startswith("2024-03-01T12:00:00")
        assert await count_users(db_session) == 1

    async def test_repeat_sign_in_keeps_identity(self, db_session):
        first = await save_user(make_record(), db=db_session)

        second = await save_user(
            make_record(
                uuid="00000000-0000-4000-8000-000000000000",
                created_at="2025-01-01T00:00:00+00:00",
                nickname="Octocat",
                signin_ip="203.0.113.9",
            ),
            db=db_session,
        )

        assert second.uuid == first.uuid
        assert second.created_at == first.created_at
        assert second.nickname == "Octocat"
        assert second.signin_ip == "203.0.113.9"
        assert await count_users(db_session) == 1

    async def test_same_email_other_provider_is_new_user(self, db_session):
        await save_user(make_record(), db=db_session)
        google = await save_user(
            make_record(
                uuid="5f0c1a7b-2f8e-4c55-8a52-7e1f0b9f1d22",
                signin_type="oidc",
                signin_provider="google",
                signin_openid="110169484474386276334",
            ),
            db=db_session,
        )

        assert google.uuid == "5f0c1a7b-2f8e-4c55-8a52-7e1f0b9f1d22"
        assert await count_users(db_session) == 2

    async def test_find_user_by_uuid(self, db_session):
        saved = await save_user(make_record(), db=db_session)

        found = await find_user_by_uuid(saved.uuid, db=db_session)
        assert found == saved

        assert await find_user_by_uuid("missing", db=db_session) is None

    async def test_without_database_raises(self):
        """With no session given and no database initialized, errors propagate."""
        with pytest.raises(RuntimeError, match="Database not initialized"):
            await save_user(make_record())
