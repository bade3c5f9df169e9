"""Unit tests for the dispatch queue publisher and consumer wiring."""
from __future__ import annotations

import json

from faststream.rabbit import RabbitBroker, TestRabbitBroker
import pytest

from notification_service.infra.messaging import NotificationPublisher, build_notifications_queue, check_broker_health
from notification_service.workers.dispatch import DispatchOutcome, DispatchWorkerPool, register_dispatch_consumer


class RecordingProcessor:
    def __init__(self) -> None:
        self.bodies: list[bytes] = []

    async def process(self, delivery):
        self.bodies.append(delivery.body)
        return DispatchOutcome.SENT


@pytest.mark.unit
class TestNotificationsQueue:
    """Test suite for queue declaration."""

    def test_queue_is_durable(self):
        queue = build_notifications_queue("notifications")

        assert queue.name == "notifications"
        assert queue.durable
        assert not queue.auto_delete


@pytest.mark.unit
class TestNotificationPublisher:
    """Test suite for NotificationPublisher."""

    @pytest.mark.asyncio
    async def test_publishes_log_reference_only(self):
        broker = RabbitBroker()
        queue = build_notifications_queue("notifications")

        @broker.subscriber(queue)
        async def handle(message: dict) -> None:
            pass

        async with TestRabbitBroker(broker):
            await NotificationPublisher(broker, queue).publish(42)

            handle.mock.assert_called_once_with({"notification_log_id": 42})


@pytest.mark.unit
class TestDispatchConsumer:
    """Test suite for the queue-to-pool subscriber."""

    @pytest.mark.asyncio
    async def test_raw_body_reaches_processor(self):
        broker = RabbitBroker()
        queue = build_notifications_queue("notifications")
        processor = RecordingProcessor()
        register_dispatch_consumer(broker, queue, DispatchWorkerPool(processor, max_workers=2))

        async with TestRabbitBroker(broker):
            await broker.publish(b"not json", queue=queue)
            await broker.publish({"notification_log_id": 7}, queue=queue)

        assert processor.bodies[0] == b"not json"
        assert json.loads(processor.bodies[1]) == {"notification_log_id": 7}


@pytest.mark.unit
class TestBrokerHealth:
    """Test suite for check_broker_health."""

    @pytest.mark.asyncio
    async def test_missing_broker_is_unavailable(self):
        health = await check_broker_health(None)

        assert health["status"] == "unavailable"

    @pytest.mark.asyncio
    async def test_stopped_broker_is_unhealthy(self):
        health = await check_broker_health(RabbitBroker())

        assert health == {"status": "unhealthy", "is_connected": False, "reason": "broker_not_running"}
