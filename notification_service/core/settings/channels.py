"""Delivery channel credentials and provider settings."""

from __future__ import annotations

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class ChannelSettings(BaseSettings):
    """Twilio (SMS, WhatsApp) and SMTP (email) provider settings.

    Environment variables use CHANNEL_ prefix.
    Example: CHANNEL_TWILIO_ACCOUNT_SID=AC..., CHANNEL_SMTP_USERNAME=me@gmail.com
    """

    # ──────────────────────────────────────────────────────────────
    # Twilio
    # ──────────────────────────────────────────────────────────────
    twilio_account_sid: str | None = Field(default=None, description="Twilio account SID")
    twilio_auth_token: SecretStr | None = Field(default=None, description="Twilio auth token")
    twilio_sms_from: str | None = Field(
        default=None,
        description="Sender phone number for SMS (E.164)",
    )
    twilio_whatsapp_from: str | None = Field(
        default=None,
        description="Sender number for WhatsApp, without the whatsapp: prefix",
    )

    # ──────────────────────────────────────────────────────────────
    # SMTP
    # ──────────────────────────────────────────────────────────────
    smtp_host: str = Field(default="smtp.gmail.com", description="SMTP submission host")
    smtp_port: int = Field(default=587, ge=1, le=65535, description="SMTP submission port")
    smtp_username: str | None = Field(default=None, description="SMTP login, usually the sender address")
    smtp_password: SecretStr | None = Field(default=None, description="SMTP password or app password")
    smtp_from: str | None = Field(
        default=None,
        description="From address; defaults to smtp_username",
    )
    smtp_start_tls: bool = Field(default=True, description="Upgrade the connection with STARTTLS")
    email_subject: str = Field(
        default="A Notification from Your Project",
        max_length=255,
        description="Subject line used for every email notification",
    )

    send_timeout: float = Field(
        default=30.0,
        gt=0,
        le=300.0,
        description="Timeout in seconds for a single provider call",
    )

    model_config = SettingsConfigDict(
        env_prefix="CHANNEL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @property
    def twilio_configured(self) -> bool:
        """Whether Twilio credentials are present."""
        return bool(self.twilio_account_sid and self.twilio_auth_token)

    @property
    def email_sender(self) -> str | None:
        """Effective From address."""
        return self.smtp_from or self.smtp_username
