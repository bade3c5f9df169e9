"""Redis client factory."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from redis.asyncio import Redis

if TYPE_CHECKING:
    from notification_service.core.settings.redis import RedisSettings

logger = logging.getLogger(__name__)


def create_redis_client(settings: RedisSettings) -> Redis:
    """Create an asyncio Redis client with a bounded connection pool.

    The client connects lazily on first command, so construction never
    blocks startup.
    """
    client = Redis.from_url(
        settings.url,
        max_connections=settings.max_connections,
        socket_timeout=settings.socket_timeout,
        socket_connect_timeout=settings.socket_connect_timeout,
        decode_responses=True,
    )
    logger.info("Redis client created", extra={"host": settings.host, "port": settings.port})
    return client
