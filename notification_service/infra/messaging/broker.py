"""RabbitMQ broker construction and lifecycle using FastStream.

The broker is built explicitly from settings and handed to the components
that need it (the ingestion publisher and the dispatch consumer); there is
no module-level broker instance.

Usage Patterns:
- API process: ``create_broker()`` in the lifespan, ``start_broker()`` on
  startup, ``stop_broker()`` on shutdown.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from faststream.rabbit import RabbitBroker

if TYPE_CHECKING:
    from notification_service.core.settings.rabbit import RabbitSettings

logger = logging.getLogger(__name__)


def create_broker(settings: RabbitSettings) -> RabbitBroker:
    """Build a RabbitBroker from settings without connecting.

    ``max_consumers`` sets the channel QoS prefetch, which bounds the number
    of unacknowledged deliveries the broker pushes to this process.
    """
    return RabbitBroker(
        settings.get_url(),
        graceful_timeout=settings.graceful_timeout,
        max_consumers=settings.prefetch_count,
        publisher_confirms=settings.publisher_confirms,
        logger=logger,
    )


async def start_broker(broker: RabbitBroker, settings: RabbitSettings) -> None:
    """Connect and start the broker, bounded by the connection timeout.

    Raises:
        ConnectionError: If the connection doesn't complete in time.
    """
    logger.info(
        "Starting RabbitMQ broker",
        extra={"host": settings.host, "connection_timeout": settings.connection_timeout},
    )
    try:
        await asyncio.wait_for(broker.start(), timeout=settings.connection_timeout)
    except TimeoutError:
        error_msg = f"RabbitMQ connection timeout after {settings.connection_timeout}s"
        logger.error(error_msg, extra={"connection_timeout": settings.connection_timeout})
        raise ConnectionError(error_msg) from None
    logger.info("RabbitMQ broker started successfully")


async def stop_broker(broker: RabbitBroker) -> None:
    """Close the broker connection; errors are logged, not raised."""
    logger.info("Stopping RabbitMQ broker")
    try:
        await broker.close()
    except Exception as e:
        logger.exception("Error stopping RabbitMQ broker", extra={"error": str(e)})
        return
    logger.info("RabbitMQ broker stopped successfully")


async def check_broker_health(broker: RabbitBroker | None) -> dict[str, Any]:
    """Report broker connection status for the health endpoint."""
    if broker is None:
        return {"status": "unavailable", "is_connected": False, "reason": "broker_not_configured"}

    if not getattr(broker, "running", False):
        return {"status": "unhealthy", "is_connected": False, "reason": "broker_not_running"}
    connection = getattr(broker, "_connection", None)
    if connection is not None and getattr(connection, "is_closed", False):
        return {"status": "unhealthy", "is_connected": False, "reason": "connection_closed"}
    return {"status": "healthy", "is_connected": True}
