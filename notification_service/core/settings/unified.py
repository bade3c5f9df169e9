"""Unified settings aggregate for convenient access to every domain."""

from __future__ import annotations

from dataclasses import dataclass

from .app import AppSettings
from .channels import ChannelSettings
from .dispatch import DispatchSettings
from .loader import (
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
from .logs import LoggingSettings
from .postgres import PostgresSettings
from .preferences import PreferenceSettings
from .rabbit import RabbitSettings
from .ratelimit import RateLimitSettings
from .redis import RedisSettings


@dataclass(frozen=True, slots=True)
class Settings:
    """All settings domains in one object.

    Example:
        settings = get_settings()
        print(settings.app.port)
        print(settings.dispatch.max_workers)
    """

    app: AppSettings
    db: PostgresSettings
    redis: RedisSettings
    rabbit: RabbitSettings
    rate_limit: RateLimitSettings
    dispatch: DispatchSettings
    channels: ChannelSettings
    preferences: PreferenceSettings
    logging: LoggingSettings


def get_settings() -> Settings:
    """Assemble the unified settings from the cached per-domain loaders."""
    return Settings(
        app=get_app_settings(),
        db=get_db_settings(),
        redis=get_redis_settings(),
        rabbit=get_rabbit_settings(),
        rate_limit=get_rate_limit_settings(),
        dispatch=get_dispatch_settings(),
        channels=get_channel_settings(),
        preferences=get_preference_settings(),
        logging=get_logging_settings(),
    )
