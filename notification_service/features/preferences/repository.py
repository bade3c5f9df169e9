"""Repository for notification preferences."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import delete, select

from notification_service.core.database.repository import BaseRepository
from notification_service.features.preferences.models import Preference

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from sqlalchemy.ext.asyncio import AsyncSession


class PreferenceRepository(BaseRepository[Preference]):
    """Repository for Preference rows keyed by (user_id, channel)."""

    def __init__(self) -> None:
        super().__init__(Preference)

    async def list_for_user(self, session: AsyncSession, user_id: str) -> Sequence[Preference]:
        stmt = select(Preference).where(Preference.user_id == user_id).order_by(Preference.channel)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def is_enabled(self, session: AsyncSession, user_id: str, channel: str) -> bool:
        """True only for an explicit enabled row for this exact channel."""
        stmt = select(Preference.id).where(
            Preference.user_id == user_id,
            Preference.channel == channel,
            Preference.enabled.is_(True),
        )
        result = await session.execute(stmt.limit(1))
        return result.scalar_one_or_none() is not None

    async def replace_for_user(
        self,
        session: AsyncSession,
        user_id: str,
        items: Iterable[tuple[str, bool]],
    ) -> Sequence[Preference]:
        """Delete the user's rows and insert ``items``. The caller commits."""
        await session.execute(delete(Preference).where(Preference.user_id == user_id))
        rows = [Preference(user_id=user_id, channel=channel, enabled=enabled) for channel, enabled in items]
        session.add_all(rows)
        await session.flush()
        self._logger.debug("db.replace: Preference(user_id=%s) -> %d rows", user_id, len(rows))
        return rows


_preference_repository: PreferenceRepository | None = None


def get_preference_repository() -> PreferenceRepository:
    """Get the PreferenceRepository singleton instance."""
    global _preference_repository
    if _preference_repository is None:
        _preference_repository = PreferenceRepository()
    return _preference_repository
