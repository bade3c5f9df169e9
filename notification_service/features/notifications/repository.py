"""Repository for notification logs."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import update

from notification_service.core.database.repository import BaseRepository
from notification_service.features.notifications.models import NotificationLog, NotificationStatus

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


class NotificationLogRepository(BaseRepository[NotificationLog]):
    """Repository for NotificationLog.

    Status changes go through ``transition_status`` only. It is a
    compare-and-set on ``status = PENDING``, so of two workers racing on the
    same log at most one write lands and a terminal status is never
    overwritten.
    """

    def __init__(self) -> None:
        super().__init__(NotificationLog)

    async def create_pending(
        self,
        session: AsyncSession,
        *,
        user_id: str,
        channel: str,
        message: str,
        recipient: str,
    ) -> NotificationLog:
        """Insert a new log in PENDING. The caller commits."""
        log = NotificationLog(
            user_id=user_id,
            channel=channel,
            message=message,
            recipient=recipient,
            status=NotificationStatus.PENDING.value,
            attempts=0,
        )
        return await self.create(session, log)

    async def transition_status(
        self,
        session: AsyncSession,
        log_id: int,
        new_status: NotificationStatus,
        *,
        error: str | None = None,
        attempts: int | None = None,
    ) -> bool:
        """Move a PENDING log to a terminal status.

        Returns:
            True if the row changed; False if the log does not exist or has
            already left PENDING.

        Raises:
            ValueError: If ``new_status`` is PENDING.
        """
        if not new_status.is_terminal:
            msg = f"Cannot transition a notification log to {new_status}"
            raise ValueError(msg)

        values: dict[str, Any] = {
            "status": new_status.value,
            "updated_at": datetime.now(UTC),
            "error": error,
        }
        if attempts is not None:
            values["attempts"] = attempts

        stmt = (
            update(NotificationLog)
            .where(
                NotificationLog.id == log_id,
                NotificationLog.status == NotificationStatus.PENDING.value,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        changed = result.rowcount == 1
        self._logger.debug(
            "db.transition: NotificationLog(%s) -> %s %s",
            log_id,
            new_status.value,
            "applied" if changed else "ignored",
        )
        return changed


_notification_log_repository: NotificationLogRepository | None = None


def get_notification_log_repository() -> NotificationLogRepository:
    """Get the NotificationLogRepository singleton instance."""
    global _notification_log_repository
    if _notification_log_repository is None:
        _notification_log_repository = NotificationLogRepository()
    return _notification_log_repository
