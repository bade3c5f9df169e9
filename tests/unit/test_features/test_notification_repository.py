"""Unit tests for NotificationLogRepository status transitions."""
from __future__ import annotations

import pytest

from notification_service.features.notifications.models import NotificationStatus


@pytest.mark.unit
class TestTransitionStatus:
    """Test suite for the PENDING-only compare-and-set."""

    @pytest.mark.asyncio
    async def test_create_pending_starts_with_zero_attempts(self, make_log, load_log):
        log = await make_log()

        stored = await load_log(log.id)
        assert stored.status == NotificationStatus.PENDING
        assert stored.attempts == 0
        assert stored.error is None
        assert stored.created_at is not None

    @pytest.mark.asyncio
    async def test_pending_log_moves_to_terminal_status(self, database, log_repository, make_log, load_log):
        log = await make_log()

        async with database.session() as session:
            changed = await log_repository.transition_status(
                session, log.id, NotificationStatus.FAILED, error="refused", attempts=2
            )
            await session.commit()

        assert changed
        stored = await load_log(log.id)
        assert stored.status == NotificationStatus.FAILED
        assert stored.error == "refused"
        assert stored.attempts == 2
        assert stored.is_terminal

    @pytest.mark.asyncio
    async def test_terminal_status_is_never_overwritten(self, database, log_repository, make_log, load_log):
        log = await make_log()
        async with database.session() as session:
            await log_repository.transition_status(session, log.id, NotificationStatus.SENT)
            await session.commit()

        async with database.session() as session:
            changed = await log_repository.transition_status(
                session, log.id, NotificationStatus.FAILED, error="late failure"
            )
            await session.commit()

        assert not changed
        stored = await load_log(log.id)
        assert stored.status == NotificationStatus.SENT
        assert stored.error is None

    @pytest.mark.asyncio
    async def test_missing_log_is_not_changed(self, database, log_repository):
        async with database.session() as session:
            changed = await log_repository.transition_status(session, 12345, NotificationStatus.SKIPPED)

        assert not changed

    @pytest.mark.asyncio
    async def test_transition_to_pending_is_rejected(self, database, log_repository, make_log):
        log = await make_log()

        async with database.session() as session:
            with pytest.raises(ValueError):
                await log_repository.transition_status(session, log.id, NotificationStatus.PENDING)

    def test_only_pending_is_non_terminal(self):
        assert not NotificationStatus.PENDING.is_terminal
        assert all(
            status.is_terminal
            for status in NotificationStatus
            if status is not NotificationStatus.PENDING
        )
