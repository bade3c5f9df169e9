"""Preference management: read and replace a user's opt-in set."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from notification_service.core.exceptions import NotFoundException
from notification_service.features.preferences.repository import PreferenceRepository, get_preference_repository
from notification_service.features.preferences.schemas import PreferenceRecord

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from notification_service.features.preferences.schemas import PreferenceReplace

logger = logging.getLogger(__name__)


class PreferenceService:
    """Owns writes to the preferences table."""

    def __init__(self, session: AsyncSession, repository: PreferenceRepository | None = None) -> None:
        self.session = session
        self.repository = repository or get_preference_repository()

    async def get_for_user(self, user_id: str) -> list[PreferenceRecord]:
        """Return the user's preferences.

        Raises:
            NotFoundException: The user has no preference records.
        """
        rows = await self.repository.list_for_user(self.session, user_id)
        if not rows:
            raise NotFoundException(
                detail=f"No preferences found for user {user_id}",
                extra={"user_id": user_id},
            )
        return [PreferenceRecord.model_validate(row) for row in rows]

    async def replace_for_user(self, user_id: str, payload: PreferenceReplace) -> list[PreferenceRecord]:
        """Replace the full preference set in one transaction."""
        rows = await self.repository.replace_for_user(
            self.session,
            user_id,
            [(item.channel.value, item.enabled) for item in payload.root],
        )
        await self.session.commit()
        logger.info("Preferences replaced", extra={"user_id": user_id, "count": len(rows)})
        return [PreferenceRecord.model_validate(row) for row in rows]
