"""Pytest fixtures for signon tests.

This module provides test fixtures that ensure:
1. No external API calls are made (Google tokeninfo, OAuth providers)
2. No real database connections; persistence tests use in-memory SQLite
3. Isolated test environment with controlled configuration
"""

import os

import pytest
import pytest_asyncio

# Set test environment BEFORE importing application modules
os.environ.setdefault("SECRET_KEY", "test-secret-key-at-least-32-characters-long")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("AUTH_URL", "https://app.example.com")
os.environ.setdefault("ENVIRONMENT", "development")

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from signon.auth.models import Account, AuthUser
from signon.database.models import Base

AUTH_ENV_VARS = (
    "NEXT_PUBLIC_AUTH_GOOGLE_ONE_TAP_ENABLED",
    "NEXT_PUBLIC_AUTH_GOOGLE_ID",
    "NEXT_PUBLIC_AUTH_GOOGLE_ENABLED",
    "AUTH_GOOGLE_ID",
    "AUTH_GOOGLE_SECRET",
    "NEXT_PUBLIC_AUTH_GITHUB_ENABLED",
    "AUTH_GITHUB_ID",
    "AUTH_GITHUB_SECRET",
)


def _clear_caches():
    from signon.auth.callbacks import get_auth_config
    from signon.auth.oauth import get_oauth
    from signon.auth.providers import get_provider_map, get_providers
    from signon.config import get_settings

    for cached in (get_settings, get_providers, get_provider_map, get_auth_config, get_oauth):
        cached.cache_clear()


# =============================================================================
# Test Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_auth_env(monkeypatch):
    """Start every test with no sign-in method configured."""
    for name in AUTH_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture(autouse=True)
def reset_caches():
    """Reset settings and registry caches so env changes take effect."""
    _clear_caches()
    yield
    _clear_caches()


@pytest.fixture
def enable_one_tap(monkeypatch):
    monkeypatch.setenv("NEXT_PUBLIC_AUTH_GOOGLE_ONE_TAP_ENABLED", "true")
    monkeypatch.setenv("NEXT_PUBLIC_AUTH_GOOGLE_ID", "one-tap-client-id")


@pytest.fixture
def enable_google(monkeypatch):
    monkeypatch.setenv("NEXT_PUBLIC_AUTH_GOOGLE_ENABLED", "true")
    monkeypatch.setenv("AUTH_GOOGLE_ID", "google-client-id")
    monkeypatch.setenv("AUTH_GOOGLE_SECRET", "google-client-secret")


@pytest.fixture
def enable_github(monkeypatch):
    monkeypatch.setenv("NEXT_PUBLIC_AUTH_GITHUB_ENABLED", "true")
    monkeypatch.setenv("AUTH_GITHUB_ID", "github-client-id")
    monkeypatch.setenv("AUTH_GITHUB_SECRET", "github-client-secret")


# =============================================================================
# Sign-in Fixtures
# =============================================================================


@pytest.fixture
def auth_user():
    """A user as reported by GitHub."""
    return AuthUser(
        id="583231",
        email="octocat@example.com",
        name="The Octocat",
        image="https://avatars.githubusercontent.com/u/583231",
    )


@pytest.fixture
def github_account():
    return Account(type="oauth", provider="github", provider_account_id="583231")


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def db_session():
    """In-memory SQLite session with the schema created."""
    engine = create_async_engine("sqlite+aiosqlite://")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()
