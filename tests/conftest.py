"""Pytest configuration and shared fixtures.

Organization:
    - Environment: settings that keep tests off external infrastructure
    - Database: in-memory SQLite with the full schema
    - Test doubles: queue deliveries, preference store, channel senders, Redis
"""

from __future__ import annotations

import os

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

# Ensure tests run without external infrastructure
os.environ.setdefault("DB_ENABLED", "false")
os.environ.setdefault("RABBIT_ENABLED", "false")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOG_JSON", "false")

from notification_service.core.settings import clear_settings_cache  # noqa: E402
from notification_service.features.notifications.models import ChannelType, NotificationLog  # noqa: E402
from notification_service.features.notifications.repository import NotificationLogRepository  # noqa: E402
from notification_service.infra.database import Database  # noqa: E402
from tests.fakes import FakePreferenceStore, FakeRedis  # noqa: E402

# ============================================================================
# Settings
# ============================================================================


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Reload settings per test so monkeypatched environment variables apply."""
    clear_settings_cache()
    yield
    clear_settings_cache()


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def database():
    """In-memory SQLite database with every table created.

    StaticPool keeps a single connection so all sessions see the same data.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    db = Database(engine)
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def log_repository() -> NotificationLogRepository:
    return NotificationLogRepository()


@pytest.fixture
def make_log(database: Database, log_repository: NotificationLogRepository):
    """Factory inserting a committed PENDING notification log."""

    async def _make_log(
        *,
        user_id: str = "user-1",
        channel: str = ChannelType.EMAIL.value,
        message: str = "hi",
        recipient: str = "u@x.com",
    ) -> NotificationLog:
        async with database.session() as session:
            log = await log_repository.create_pending(
                session,
                user_id=user_id,
                channel=channel,
                message=message,
                recipient=recipient,
            )
            await session.commit()
        return log

    return _make_log


@pytest.fixture
def load_log(database: Database):
    """Read a notification log in a fresh session."""

    async def _load_log(log_id: int) -> NotificationLog | None:
        async with database.session() as session:
            return await session.get(NotificationLog, log_id)

    return _load_log


# ============================================================================
# Test Doubles
# ============================================================================


@pytest.fixture
def preference_store() -> FakePreferenceStore:
    return FakePreferenceStore({"user-1": {"email": True, "sms": False}})


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()
