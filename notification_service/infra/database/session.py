"""Database session management with SQLAlchemy's async engine.

The engine and session factory are owned by a ``Database`` instance that is
constructed once at startup and injected where needed, rather than living in
module globals. Sessions are acquired with ``async with database.session()``
and released on exit.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import TYPE_CHECKING

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from notification_service.core.database.base import Base

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from notification_service.core.settings.postgres import PostgresSettings

logger = logging.getLogger(__name__)


class Database:
    """Owns an async engine and its session factory.

    Example:
        database = Database(create_async_engine("sqlite+aiosqlite:///:memory:"))
        async with database.session() as session:
            await session.execute(text("SELECT 1"))
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session; roll back on error, always close.

        Commits are explicit: callers decide where a transaction ends.
        """
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def create_all(self) -> None:
        """Create every table registered on Base.metadata (idempotent)."""
        # Import models so their tables are registered
        from notification_service.features.notifications import models as _notification_models
        from notification_service.features.preferences import models as _preference_models

        _ = _notification_models, _preference_models
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ensured")

    async def ping(self) -> bool:
        """Return True when a trivial query succeeds."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception:
            logger.warning("Database ping failed", exc_info=True)
            return False
        return True

    async def dispose(self) -> None:
        """Close every pooled connection."""
        await self.engine.dispose()
        logger.info("Database engine disposed")


def create_database(settings: PostgresSettings) -> Database:
    """Build a Database from settings."""
    engine = create_async_engine(settings.url, **settings.engine_kwargs())
    logger.info(
        "Database engine created",
        extra={"backend": "sqlite" if settings.is_sqlite else "postgresql", "host": settings.host},
    )
    return Database(engine)
