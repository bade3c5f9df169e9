"""Preference store settings."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PreferenceBackend = Literal["database", "http"]


class PreferenceSettings(BaseSettings):
    """Where the dispatch pipeline reads opt-in preferences from.

    Environment variables use PREFERENCES_ prefix.

    ``database`` reads the preferences table in the service database.
    ``http`` calls a standalone preference service over HTTP.
    """

    backend: PreferenceBackend = Field(default="database", description="Preference store backend")
    service_url: str = Field(
        default="http://localhost:8081",
        description="Base URL of the preference service (http backend only)",
    )
    timeout: float = Field(
        default=5.0,
        gt=0,
        le=60.0,
        description="HTTP timeout in seconds for preference lookups",
    )

    model_config = SettingsConfigDict(
        env_prefix="PREFERENCES_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )
