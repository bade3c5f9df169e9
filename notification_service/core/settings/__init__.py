"""Modular Pydantic Settings v2 configuration.

Each domain has its own frozen settings class and environment prefix:

    APP_         application / ingestion API
    DB_          PostgreSQL (or SQLite fallback)
    REDIS_       rate limiter store
    RABBIT_      durable queue
    RATE_LIMIT_  ingestion rate limit
    DISPATCH_    worker pool and send retry policy
    CHANNEL_     Twilio and SMTP credentials
    PREFERENCES_ preference store backend
    LOG_         logging

Import settings via cached loaders:
    from notification_service.core.settings import get_dispatch_settings

Or use unified settings:
    from notification_service.core.settings import get_settings

    settings = get_settings()
    print(settings.rabbit.queue_name)
"""

from __future__ import annotations

from .loader import (
    clear_settings_cache,
    get_app_settings,
    get_channel_settings,
    get_db_settings,
    get_dispatch_settings,
    get_logging_settings,
    get_preference_settings,
    get_rabbit_settings,
    get_rate_limit_settings,
    get_redis_settings,
)
from .unified import Settings, get_settings

__all__ = [
    "Settings",
    "clear_settings_cache",
    "get_app_settings",
    "get_channel_settings",
    "get_db_settings",
    "get_dispatch_settings",
    "get_logging_settings",
    "get_preference_settings",
    "get_rabbit_settings",
    "get_rate_limit_settings",
    "get_redis_settings",
    "get_settings",
]
