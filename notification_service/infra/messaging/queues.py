"""FastStream queue definitions.

The notifications queue is durable and not auto-deleted, so messages
survive broker restarts until a consumer acknowledges them.
"""

from __future__ import annotations

from faststream.rabbit import RabbitQueue


def build_notifications_queue(name: str = "notifications") -> RabbitQueue:
    """Durable queue carrying ``{"notification_log_id": ...}`` payloads.

    Published on the default exchange with the queue name as routing key.
    """
    return RabbitQueue(
        name=name,
        durable=True,
        auto_delete=False,
        exclusive=False,
    )
