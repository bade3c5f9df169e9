"""Unit tests for the ingestion gateway."""
from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy import func, select

from notification_service.core.exceptions import (
    InternalServerException,
    NotOptedInException,
    RateLimitException,
    ValidationException,
)
from notification_service.features.notifications.models import ChannelType, NotificationLog, NotificationStatus
from notification_service.features.notifications.schemas import NotificationRequest
from notification_service.features.notifications.service import IngestionGateway
from notification_service.infra.ratelimit import FixedWindowRateLimiter


class RecordingPublisher:
    """Publisher double that records log ids or fails on demand."""

    def __init__(self) -> None:
        self.published: list[int] = []
        self.error: Exception | None = None
        self.delay = 0.0

    async def publish(self, log_id: int) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        self.published.append(log_id)


def email_request(user_id: str = "user-1") -> NotificationRequest:
    return NotificationRequest(user_id=user_id, channel=ChannelType.EMAIL, message="hi", recipient="u@x.com")


async def count_logs(database) -> int:
    async with database.session() as session:
        return await session.scalar(select(func.count()).select_from(NotificationLog))


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def gateway(database, preference_store, publisher) -> IngestionGateway:
    return IngestionGateway(
        database=database,
        preference_store=preference_store,
        publisher=publisher,
        timeout=0.5,
    )


@pytest.mark.unit
class TestIngestionGatewaySubmit:
    """Test suite for IngestionGateway.submit."""

    @pytest.mark.asyncio
    async def test_accepted_request_persists_pending_log_and_publishes_id(
        self, gateway, publisher, database, load_log
    ):
        accepted = await gateway.submit(email_request(), "10.0.0.1")

        assert accepted.status == "Notification accepted"
        assert publisher.published == [accepted.log_id]
        log = await load_log(accepted.log_id)
        assert log.status == NotificationStatus.PENDING
        assert log.user_id == "user-1"
        assert log.channel == "email"
        assert log.recipient == "u@x.com"
        assert log.message == "hi"
        assert await count_logs(database) == 1

    @pytest.mark.asyncio
    async def test_accepts_mapping_with_legacy_type_field(self, gateway, publisher):
        accepted = await gateway.submit(
            {"user_id": "user-1", "type": "email", "message": "hi", "recipient": "u@x.com"},
            "10.0.0.1",
        )

        assert publisher.published == [accepted.log_id]

    @pytest.mark.asyncio
    async def test_invalid_mapping_raises_validation_error(self, gateway, publisher, database):
        with pytest.raises(ValidationException) as exc_info:
            await gateway.submit({"user_id": "user-1", "channel": "email"}, "10.0.0.1")

        assert exc_info.value.status_code == 400
        assert exc_info.value.extra["errors"]
        assert publisher.published == []
        assert await count_logs(database) == 0

    @pytest.mark.asyncio
    async def test_not_opted_in_creates_no_log(self, gateway, publisher, database):
        request = NotificationRequest(user_id="user-1", channel="sms", message="hi", recipient="+15551234567")

        with pytest.raises(NotOptedInException) as exc_info:
            await gateway.submit(request, "10.0.0.1")

        assert exc_info.value.status_code == 400
        assert exc_info.value.extra == {"user_id": "user-1", "channel": "sms"}
        assert publisher.published == []
        assert await count_logs(database) == 0

    @pytest.mark.asyncio
    async def test_unknown_user_is_not_opted_in(self, gateway, database):
        with pytest.raises(NotOptedInException):
            await gateway.submit(email_request(user_id="nobody"), "10.0.0.1")

        assert await count_logs(database) == 0

    @pytest.mark.asyncio
    async def test_rate_limited_request_creates_no_log(
        self, database, preference_store, publisher, fake_redis
    ):
        gateway = IngestionGateway(
            database=database,
            preference_store=preference_store,
            publisher=publisher,
            rate_limiter=FixedWindowRateLimiter(fake_redis, limit=2, window=60),
        )
        await gateway.submit(email_request(), "10.0.0.1")
        await gateway.submit(email_request(), "10.0.0.1")

        with pytest.raises(RateLimitException) as exc_info:
            await gateway.submit(email_request(), "10.0.0.1")

        assert exc_info.value.status_code == 429
        assert exc_info.value.extra["retry_after"] == 60
        assert exc_info.value.extra["limit"] == 2
        assert len(publisher.published) == 2
        assert await count_logs(database) == 2

    @pytest.mark.asyncio
    async def test_rate_limit_is_checked_before_opt_in(
        self, database, preference_store, publisher, fake_redis
    ):
        gateway = IngestionGateway(
            database=database,
            preference_store=preference_store,
            publisher=publisher,
            rate_limiter=FixedWindowRateLimiter(fake_redis, limit=1, window=60),
        )
        await gateway.submit(email_request(), "10.0.0.1")
        preference_store.calls.clear()

        with pytest.raises(RateLimitException):
            await gateway.submit(email_request(), "10.0.0.1")

        assert preference_store.calls == []

    @pytest.mark.asyncio
    async def test_unavailable_rate_limiter_rejects_with_internal_error(
        self, database, preference_store, publisher
    ):
        redis = AsyncMock()
        redis.eval.side_effect = RedisConnectionError("connection refused")
        gateway = IngestionGateway(
            database=database,
            preference_store=preference_store,
            publisher=publisher,
            rate_limiter=FixedWindowRateLimiter(redis),
        )

        with pytest.raises(InternalServerException) as exc_info:
            await gateway.submit(email_request(), "10.0.0.1")

        assert exc_info.value.extra == {"dependency": "rate_limiter"}
        assert await count_logs(database) == 0

    @pytest.mark.asyncio
    async def test_preference_store_failure_is_internal_error(
        self, gateway, preference_store, publisher, database
    ):
        preference_store.fail = True

        with pytest.raises(InternalServerException) as exc_info:
            await gateway.submit(email_request(), "10.0.0.1")

        assert exc_info.value.status_code == 500
        assert exc_info.value.extra == {"dependency": "preference_store"}
        assert publisher.published == []
        assert await count_logs(database) == 0

    @pytest.mark.asyncio
    async def test_preference_lookup_timeout_is_internal_error(self, database, publisher):
        slow_store = AsyncMock()

        async def never_answers(user_id, channel):
            await asyncio.sleep(10)

        slow_store.is_opted_in.side_effect = never_answers
        gateway = IngestionGateway(
            database=database,
            preference_store=slow_store,
            publisher=publisher,
            timeout=0.05,
        )

        with pytest.raises(InternalServerException):
            await gateway.submit(email_request(), "10.0.0.1")

        assert await count_logs(database) == 0

    @pytest.mark.asyncio
    async def test_publish_failure_marks_log_failed(self, gateway, publisher, database):
        publisher.error = ConnectionError("broker unreachable")

        with pytest.raises(InternalServerException) as exc_info:
            await gateway.submit(email_request(), "10.0.0.1")

        assert exc_info.value.extra == {"dependency": "queue"}
        async with database.session() as session:
            log = (await session.scalars(select(NotificationLog))).one()
        assert log.status == NotificationStatus.FAILED
        assert "broker unreachable" in log.error

    @pytest.mark.asyncio
    async def test_publish_timeout_marks_log_failed(self, gateway, publisher, database):
        publisher.delay = 5.0

        with pytest.raises(InternalServerException):
            await gateway.submit(email_request(), "10.0.0.1")

        async with database.session() as session:
            log = (await session.scalars(select(NotificationLog))).one()
        assert log.status == NotificationStatus.FAILED
        assert publisher.published == []

    @pytest.mark.asyncio
    async def test_each_request_gets_its_own_log(self, gateway, publisher):
        first = await gateway.submit(email_request(), "10.0.0.1")
        second = await gateway.submit(email_request(), "10.0.0.1")

        assert first.log_id != second.log_id
        assert publisher.published == [first.log_id, second.log_id]
