"""Ingestion rate limit settings."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RateLimitSettings(BaseSettings):
    """Fixed-window rate limit applied per client on the ingestion endpoint.

    Environment variables use RATE_LIMIT_ prefix.
    Example: RATE_LIMIT_LIMIT=20, RATE_LIMIT_WINDOW_SECONDS=60
    """

    enabled: bool = Field(default=True, description="Enforce the ingestion rate limit.")
    limit: int = Field(
        default=20,
        ge=1,
        le=100_000,
        description="Requests allowed per client within one window.",
    )
    window_seconds: int = Field(
        default=60,
        ge=1,
        le=86_400,
        description="Window length in seconds; starts on the first request.",
    )
    key_prefix: str = Field(
        default="ratelimit:notifications",
        min_length=1,
        description="Prefix for limiter keys in Redis.",
    )
    trust_forwarded_for: bool = Field(
        default=False,
        description="Use the first X-Forwarded-For hop as the client key.",
    )

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )
