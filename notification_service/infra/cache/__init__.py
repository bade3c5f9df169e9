"""Redis client construction."""

from __future__ import annotations

from notification_service.infra.cache.redis import create_redis_client

__all__ = ["create_redis_client"]
