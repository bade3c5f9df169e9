"""Unit tests for settings defaults, environment overrides and caching."""
from __future__ import annotations

from pydantic import ValidationError
import pytest

from notification_service.core.settings import (
    clear_settings_cache,
    get_app_settings,
    get_db_settings,
    get_dispatch_settings,
    get_logging_settings,
    get_rabbit_settings,
    get_rate_limit_settings,
    get_settings,
)
from notification_service.core.settings.channels import ChannelSettings


@pytest.mark.unit
class TestDefaults:
    """Out-of-the-box values match the documented service behavior."""

    def test_api_listens_on_8082(self):
        assert get_app_settings().port == 8082
        assert get_app_settings().api_prefix == "/v1"

    def test_rate_limit_is_20_per_minute(self):
        settings = get_rate_limit_settings()

        assert settings.limit == 20
        assert settings.window_seconds == 60
        assert settings.trust_forwarded_for is False

    def test_queue_name(self):
        assert get_rabbit_settings().queue_name == "notifications"

    def test_dispatch_pool(self):
        settings = get_dispatch_settings()

        assert settings.max_workers == 16
        assert settings.saturation_policy == "wait"
        assert settings.send_max_attempts == 1

    def test_email_subject(self):
        assert ChannelSettings().email_subject == "A Notification from Your Project"


@pytest.mark.unit
class TestEnvironmentOverrides:
    """Each domain reads its own prefixed environment variables."""

    def test_dispatch_overrides(self, monkeypatch):
        monkeypatch.setenv("DISPATCH_MAX_WORKERS", "4")
        monkeypatch.setenv("DISPATCH_SATURATION_POLICY", "requeue")

        settings = get_dispatch_settings()

        assert settings.max_workers == 4
        assert settings.saturation_policy == "requeue"

    def test_log_json_toggle(self, monkeypatch):
        monkeypatch.setenv("LOG_JSON", "false")

        assert get_logging_settings().json_logs is False

    def test_invalid_value_is_rejected(self, monkeypatch):
        monkeypatch.setenv("DISPATCH_MAX_WORKERS", "0")

        with pytest.raises(ValidationError):
            get_dispatch_settings()

    def test_disabled_database_falls_back_to_sqlite(self):
        settings = get_db_settings()

        assert not settings.enabled
        assert settings.is_sqlite

    def test_settings_are_frozen(self):
        with pytest.raises(ValidationError):
            get_app_settings().port = 9000

    def test_sender_falls_back_to_smtp_username(self):
        settings = ChannelSettings(smtp_username="me@example.com")

        assert settings.email_sender == "me@example.com"
        assert not settings.twilio_configured


@pytest.mark.unit
class TestCaching:
    """Loaders cache until cleared."""

    def test_loader_returns_cached_instance(self, monkeypatch):
        first = get_rate_limit_settings()
        monkeypatch.setenv("RATE_LIMIT_LIMIT", "5")

        assert get_rate_limit_settings() is first

        clear_settings_cache()
        assert get_rate_limit_settings().limit == 5

    def test_unified_settings_collects_every_domain(self):
        settings = get_settings()

        assert settings.app is get_app_settings()
        assert settings.dispatch is get_dispatch_settings()
        assert settings.rabbit.queue_name == "notifications"
