"""Shared test fixtures."""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

# Settings are read when collabex.main is imported; point them at an in-memory database first.
os.environ["COLLABEX_DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["COLLABEX_JWT_SECRET"] = "test-secret-with-enough-bytes-for-hs256-signing"
os.environ["COLLABEX_JWT_ALGORITHM"] = "HS256"
os.environ["COLLABEX_REDIS_URL"] = "redis://127.0.0.1:1/0"
os.environ["COLLABEX_LOG_FORMAT"] = "console"
os.environ["COLLABEX_VERIFICATION_LIVE_CHECK"] = "false"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from collabex.auth.jwt import reset_keys  # noqa: E402
from collabex.config import get_settings  # noqa: E402
from collabex.database import close_db, get_engine, get_session_factory, init_db  # noqa: E402
from collabex.db import models  # noqa: E402, F401
from collabex.db.base import Base  # noqa: E402
from collabex.email.service import EmailService  # noqa: E402

get_settings.cache_clear()
reset_keys()


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh in-memory schema plus a session for arranging and asserting rows.

    Arrange steps must commit: the app's sessions share the same connection.
    """
    await init_db(get_settings().database_url)
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with get_session_factory()() as session:
        yield session

    await close_db()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to a fresh app. Redis is left uninitialized, so publishes are dropped."""
    from collabex.main import create_app

    transport = ASGITransport(app=create_app())
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def email_provider(monkeypatch):
    """Replace the email provider with a mock that accepts every send."""
    provider = MagicMock()
    provider.send = AsyncMock(return_value=True)
    monkeypatch.setattr("collabex.email.service._email_service", EmailService(provider=provider))
    return provider
