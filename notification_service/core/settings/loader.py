"""LRU-cached settings loaders.

Settings are loaded and validated once, then cached for the lifetime of the process.

Testing:
    In tests, clear the cache to force reload:
    get_app_settings.cache_clear()

    Or build instances directly with overrides:
    settings = DispatchSettings(max_workers=2)
"""

from __future__ import annotations

from functools import lru_cache

from .app import AppSettings
from .channels import ChannelSettings
from .dispatch import DispatchSettings
from .logs import LoggingSettings
from .postgres import PostgresSettings
from .preferences import PreferenceSettings
from .rabbit import RabbitSettings
from .ratelimit import RateLimitSettings
from .redis import RedisSettings


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    """Get cached application settings."""
    return AppSettings()


@lru_cache(maxsize=1)
def get_db_settings() -> PostgresSettings:
    """Get cached database settings."""
    return PostgresSettings()


@lru_cache(maxsize=1)
def get_redis_settings() -> RedisSettings:
    """Get cached Redis settings."""
    return RedisSettings()


@lru_cache(maxsize=1)
def get_rabbit_settings() -> RabbitSettings:
    """Get cached RabbitMQ settings."""
    return RabbitSettings()


@lru_cache(maxsize=1)
def get_rate_limit_settings() -> RateLimitSettings:
    """Get cached ingestion rate limit settings."""
    return RateLimitSettings()


@lru_cache(maxsize=1)
def get_dispatch_settings() -> DispatchSettings:
    """Get cached dispatch worker pool settings."""
    return DispatchSettings()


@lru_cache(maxsize=1)
def get_channel_settings() -> ChannelSettings:
    """Get cached channel provider settings."""
    return ChannelSettings()


@lru_cache(maxsize=1)
def get_preference_settings() -> PreferenceSettings:
    """Get cached preference store settings."""
    return PreferenceSettings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings."""
    return LoggingSettings()


def clear_settings_cache() -> None:
    """Drop every cached settings instance."""
    for loader in (
        get_app_settings,
        get_db_settings,
        get_redis_settings,
        get_rabbit_settings,
        get_rate_limit_settings,
        get_dispatch_settings,
        get_channel_settings,
        get_preference_settings,
        get_logging_settings,
    ):
        loader.cache_clear()
