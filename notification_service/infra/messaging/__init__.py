"""RabbitMQ messaging via FastStream.

- Broker: construction and lifecycle with connection timeouts
- Queues: the durable notifications queue
- Publisher: typed publishing of dispatch messages
"""

from __future__ import annotations

from notification_service.infra.messaging.broker import (
    check_broker_health,
    create_broker,
    start_broker,
    stop_broker,
)
from notification_service.infra.messaging.publisher import NotificationPublisher
from notification_service.infra.messaging.queues import build_notifications_queue

__all__ = [
    "NotificationPublisher",
    "build_notifications_queue",
    "check_broker_health",
    "create_broker",
    "start_broker",
    "stop_broker",
]
