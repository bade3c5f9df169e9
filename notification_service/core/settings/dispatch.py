"""Dispatch worker pool settings."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

SaturationPolicy = Literal["wait", "requeue"]


class DispatchSettings(BaseSettings):
    """Settings for the queue consumer and its bounded worker pool.

    Environment variables use DISPATCH_ prefix.

    The pool size should match downstream capacity: database connections
    and the outbound gateways' own rate limits.
    """

    max_workers: int = Field(
        default=16,
        ge=1,
        le=1024,
        description="Maximum number of deliveries processed concurrently.",
    )
    saturation_policy: SaturationPolicy = Field(
        default="wait",
        description=(
            "'wait' blocks the consumer until a worker frees up; "
            "'requeue' gives the delivery back to the broker after acquire_timeout."
        ),
    )
    acquire_timeout: float = Field(
        default=5.0,
        gt=0,
        le=600.0,
        description="Seconds to wait for a free worker under the 'requeue' policy.",
    )
    send_max_attempts: int = Field(
        default=1,
        ge=1,
        le=10,
        description="Channel send attempts before a notification is marked FAILED (1 = no retry).",
    )
    send_retry_delay: float = Field(
        default=1.0,
        ge=0,
        le=60.0,
        description="Initial backoff in seconds between send attempts.",
    )
    shutdown_timeout: float = Field(
        default=30.0,
        ge=0,
        le=600.0,
        description="Seconds to wait for in-flight dispatches on shutdown.",
    )

    model_config = SettingsConfigDict(
        env_prefix="DISPATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )
