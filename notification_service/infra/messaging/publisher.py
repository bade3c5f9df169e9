"""Publishing dispatch messages to the durable notifications queue."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from notification_service.features.notifications.schemas import DispatchMessage

if TYPE_CHECKING:
    from faststream.rabbit import RabbitBroker, RabbitQueue

logger = logging.getLogger(__name__)


class NotificationPublisher:
    """Publishes ``DispatchMessage`` payloads as persistent messages.

    The payload is only the log identity; the worker reads everything else
    from the log store, so the queue never carries a stale copy.
    """

    def __init__(self, broker: RabbitBroker, queue: RabbitQueue) -> None:
        self.broker = broker
        self.queue = queue

    async def publish(self, log_id: int) -> None:
        """Publish a dispatch message for ``log_id``.

        Raises whatever the broker raises (connection loss, missing confirm);
        the caller decides how to classify it.
        """
        message = DispatchMessage(notification_log_id=log_id)
        await self.broker.publish(
            message.model_dump(),
            queue=self.queue,
            persist=True,
            content_type="application/json",
        )
        logger.debug("Dispatch message published", extra={"log_id": log_id, "queue": self.queue.name})
