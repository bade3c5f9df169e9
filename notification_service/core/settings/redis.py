"""Redis settings for the ingestion rate limiter."""

from __future__ import annotations

from urllib.parse import quote, urlparse

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RedisSettings(BaseSettings):
    """Redis connection settings.

    Environment variables use REDIS_ prefix.
    Example: REDIS_REDIS_URL="redis://localhost:6379/0"

    Supports bidirectional configuration:
    1. Provide REDIS_URL → components are parsed automatically
    2. Provide components (host, port, etc.) → URL is built automatically
    """

    redis_url: str | None = Field(
        default=None,
        alias="REDIS_URL",
        description="Redis connection URL. If provided, overrides component fields.",
    )
    host: str = Field(default="localhost", description="Redis server hostname or IP address")
    port: int = Field(default=6379, ge=1, le=65535, description="Redis server port")
    db: int = Field(default=0, ge=0, le=15, description="Redis database number (0-15)")
    username: str | None = Field(default=None, description="Redis username (Redis 6+ ACL)")
    password: SecretStr | None = Field(default=None, description="Redis password")

    max_connections: int = Field(default=50, ge=1, le=1000, description="Connection pool size")
    socket_timeout: float = Field(
        default=2.0,
        ge=0.1,
        le=30.0,
        description="Socket timeout in seconds; the limiter fails closed when exceeded",
    )
    socket_connect_timeout: float = Field(
        default=2.0,
        ge=0.1,
        le=30.0,
        description="Socket connection timeout in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="REDIS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        populate_by_name=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @model_validator(mode="after")
    def _apply_url(self) -> RedisSettings:
        """Populate components from redis_url when set."""
        if not self.redis_url:
            return self
        parsed = urlparse(self.redis_url)
        if parsed.hostname:
            object.__setattr__(self, "host", parsed.hostname)
        if parsed.port:
            object.__setattr__(self, "port", parsed.port)
        if parsed.username:
            object.__setattr__(self, "username", parsed.username)
        if parsed.password:
            object.__setattr__(self, "password", SecretStr(parsed.password))
        if parsed.path and parsed.path.strip("/").isdigit():
            object.__setattr__(self, "db", int(parsed.path.strip("/")))
        return self

    @property
    def url(self) -> str:
        """Redis URL built from component fields."""
        auth = ""
        if self.password is not None:
            secret = quote(self.password.get_secret_value(), safe="")
            auth = f"{self.username or ''}:{secret}@"
        elif self.username:
            auth = f"{self.username}@"
        return f"redis://{auth}{self.host}:{self.port}/{self.db}"
