"""Generic repository base for SQLAlchemy models.

Repositories hold no session: every method takes one, and the caller owns
the transaction. Feature repositories add their own queries on top.

Example:
    class NotificationLogRepository(BaseRepository[NotificationLog]):
        async def count_pending(self, session: AsyncSession) -> int:
            stmt = select(func.count()).where(NotificationLog.status == "PENDING")
            return await session.scalar(stmt)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from notification_service.core.database.exceptions import NotFoundError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


class BaseRepository[T]:
    """Primary-key lookup and insert for one mapped class."""

    __slots__ = ("model", "_logger")

    def __init__(self, model: type[T]) -> None:
        self.model = model
        self._logger = logging.getLogger(f"repository.{model.__name__}")

    async def get(self, session: AsyncSession, id: Any) -> T | None:  # noqa: A002
        instance = await session.get(self.model, id)
        self._logger.debug(
            "db.get: %s(%s) -> %s",
            self.model.__name__,
            id,
            "found" if instance else "not found",
        )
        return instance

    async def get_or_raise(self, session: AsyncSession, id: Any) -> T:  # noqa: A002
        """Like ``get``, but raise ``NotFoundError`` when no row matches."""
        instance = await self.get(session, id)
        if instance is None:
            raise NotFoundError(self.model.__name__, {"id": id})
        return instance

    async def create(self, session: AsyncSession, instance: T) -> T:
        """Insert ``instance`` and load its generated id and server defaults.

        Flushes but does not commit.
        """
        session.add(instance)
        await session.flush()
        await session.refresh(instance)
        self._logger.debug("db.create: %s(id=%s)", self.model.__name__, getattr(instance, "id", None))
        return instance
