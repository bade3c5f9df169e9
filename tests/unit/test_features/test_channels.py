"""Unit tests for channel senders and the channel registry."""
from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import aiosmtplib
import pytest
from twilio.base.exceptions import TwilioRestException

from notification_service.core.exceptions import SendError, UnsupportedChannelError
from notification_service.core.settings.channels import ChannelSettings
from notification_service.features.notifications.channels import (
    ChannelRegistry,
    ChannelSender,
    SmtpEmailSender,
    TwilioMessagingSender,
    build_channel_registry,
)
from notification_service.features.notifications.models import ChannelType
from tests.fakes import FakeSender


def twilio_client() -> MagicMock:
    client = MagicMock()
    client.messages.create.return_value = SimpleNamespace(sid="SM123", status="queued")
    return client


class FakeSMTP:
    """Stands in for ``aiosmtplib.SMTP``; records every instance created."""

    instances: list[FakeSMTP] = []

    def __init__(self, **kwargs) -> None:
        self.kwargs = kwargs
        self.login = AsyncMock()
        self.send_message = AsyncMock(return_value=({}, "250 OK"))
        FakeSMTP.instances.append(self)

    async def __aenter__(self) -> FakeSMTP:
        return self

    async def __aexit__(self, *exc_info) -> bool:
        return False


@pytest.fixture
def fake_smtp(monkeypatch) -> type[FakeSMTP]:
    FakeSMTP.instances = []
    monkeypatch.setattr(aiosmtplib, "SMTP", FakeSMTP)
    return FakeSMTP


@pytest.fixture
def email_sender() -> SmtpEmailSender:
    return SmtpEmailSender(
        hostname="smtp.example.com",
        port=587,
        username="noreply@example.com",
        password="app-password",
        sender="noreply@example.com",
        subject="A Notification from Your Project",
    )


@pytest.mark.unit
class TestTwilioMessagingSender:
    """Test suite for SMS and WhatsApp sends."""

    @pytest.mark.asyncio
    async def test_sms_send_uses_plain_numbers(self):
        client = twilio_client()
        sender = TwilioMessagingSender(ChannelType.SMS, client=client, from_number="+15550000000")

        receipt = await sender.send("+15551234567", "Your order shipped")

        client.messages.create.assert_called_once_with(
            to="+15551234567", from_="+15550000000", body="Your order shipped"
        )
        assert receipt.channel is ChannelType.SMS
        assert receipt.provider_message_id == "SM123"

    @pytest.mark.asyncio
    async def test_whatsapp_send_prefixes_both_numbers(self):
        client = twilio_client()
        sender = TwilioMessagingSender(
            ChannelType.WHATSAPP,
            client=client,
            from_number="+14155238886",
            address_prefix="whatsapp:",
        )

        await sender.send("+15551234567", "hi")

        client.messages.create.assert_called_once_with(
            to="whatsapp:+15551234567", from_="whatsapp:+14155238886", body="hi"
        )

    @pytest.mark.asyncio
    async def test_whatsapp_prefix_is_not_doubled(self):
        client = twilio_client()
        sender = TwilioMessagingSender(
            ChannelType.WHATSAPP,
            client=client,
            from_number="whatsapp:+14155238886",
            address_prefix="whatsapp:",
        )

        await sender.send("whatsapp:+15551234567", "hi")

        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["to"] == "whatsapp:+15551234567"
        assert kwargs["from_"] == "whatsapp:+14155238886"

    @pytest.mark.asyncio
    async def test_provider_rejection_becomes_send_error(self):
        client = twilio_client()
        client.messages.create.side_effect = TwilioRestException(
            400, "/Messages.json", msg="The 'To' number is not a valid phone number.", code=21211
        )
        sender = TwilioMessagingSender(ChannelType.SMS, client=client, from_number="+15550000000")

        with pytest.raises(SendError) as exc_info:
            await sender.send("+15551234567", "hi")

        assert exc_info.value.channel == ChannelType.SMS
        assert exc_info.value.provider_code == "21211"
        assert "not a valid phone number" in exc_info.value.reason

    @pytest.mark.asyncio
    async def test_network_failure_becomes_send_error(self):
        client = twilio_client()
        client.messages.create.side_effect = ConnectionResetError("reset by peer")
        sender = TwilioMessagingSender(ChannelType.SMS, client=client, from_number="+15550000000")

        with pytest.raises(SendError, match="ConnectionResetError"):
            await sender.send("+15551234567", "hi")

    @pytest.mark.asyncio
    async def test_unconfigured_sender_fails_every_send(self):
        sender = TwilioMessagingSender.from_settings(ChannelType.SMS, ChannelSettings())

        with pytest.raises(SendError, match="not configured"):
            await sender.send("+15551234567", "hi")

    def test_from_settings_picks_channel_sender_number(self):
        settings = ChannelSettings(
            twilio_account_sid="AC00000000000000000000000000000000",
            twilio_auth_token="token",
            twilio_sms_from="+15550000000",
            twilio_whatsapp_from="+14155238886",
        )

        sms = TwilioMessagingSender.from_settings(ChannelType.SMS, settings)
        whatsapp = TwilioMessagingSender.from_settings(ChannelType.WHATSAPP, settings)

        assert sms.from_number == "+15550000000"
        assert sms.address_prefix == ""
        assert whatsapp.from_number == "+14155238886"
        assert whatsapp.address_prefix == "whatsapp:"
        assert sms.client is not None

    def test_from_settings_rejects_email_channel(self):
        with pytest.raises(ValueError):
            TwilioMessagingSender.from_settings(ChannelType.EMAIL, ChannelSettings())


@pytest.mark.unit
class TestSmtpEmailSender:
    """Test suite for email sends."""

    def test_build_message_has_text_and_escaped_html_parts(self, email_sender):
        message = email_sender.build_message("u@x.com", "5 < 6 & <b>bold</b>")

        assert message["Subject"] == "A Notification from Your Project"
        assert message["From"] == "noreply@example.com"
        assert message["To"] == "u@x.com"
        assert message["Message-ID"]
        plain, rich = message.get_payload()
        assert plain.get_content_type() == "text/plain"
        assert rich.get_content_type() == "text/html"
        html_body = rich.get_payload(decode=True).decode()
        assert html_body == "<html><body>5 &lt; 6 &amp; &lt;b&gt;bold&lt;/b&gt;</body></html>"

    @pytest.mark.asyncio
    async def test_send_logs_in_and_submits(self, email_sender, fake_smtp):
        receipt = await email_sender.send("u@x.com", "hi")

        (smtp,) = fake_smtp.instances
        assert smtp.kwargs == {
            "hostname": "smtp.example.com",
            "port": 587,
            "start_tls": True,
            "timeout": 30.0,
        }
        smtp.login.assert_awaited_once_with("noreply@example.com", "app-password")
        smtp.send_message.assert_awaited_once()
        assert receipt.channel is ChannelType.EMAIL
        assert receipt.provider_message_id

    @pytest.mark.asyncio
    async def test_send_skips_login_without_credentials(self, fake_smtp):
        sender = SmtpEmailSender(
            hostname="localhost",
            port=25,
            username=None,
            password=None,
            sender="noreply@example.com",
            subject="Hi",
            start_tls=False,
        )

        await sender.send("u@x.com", "hi")

        fake_smtp.instances[0].login.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_server_rejection_becomes_send_error(self, email_sender, fake_smtp, monkeypatch):
        def rejecting_smtp(**kwargs):
            smtp = FakeSMTP(**kwargs)
            smtp.send_message.side_effect = aiosmtplib.SMTPResponseException(550, "Mailbox unavailable")
            return smtp

        monkeypatch.setattr(aiosmtplib, "SMTP", rejecting_smtp)

        with pytest.raises(SendError) as exc_info:
            await email_sender.send("u@x.com", "hi")

        assert exc_info.value.provider_code == "550"
        assert exc_info.value.reason == "Mailbox unavailable"

    @pytest.mark.asyncio
    async def test_refused_recipient_becomes_send_error(self, email_sender, monkeypatch):
        def refusing_smtp(**kwargs):
            smtp = FakeSMTP(**kwargs)
            smtp.send_message.return_value = ({"u@x.com": (550, "no such user")}, "250 OK")
            return smtp

        monkeypatch.setattr(aiosmtplib, "SMTP", refusing_smtp)

        with pytest.raises(SendError, match="recipient refused"):
            await email_sender.send("u@x.com", "hi")

    @pytest.mark.asyncio
    async def test_connection_failure_becomes_send_error(self, email_sender, monkeypatch):
        def unreachable_smtp(**kwargs):
            smtp = FakeSMTP(**kwargs)
            smtp.login.side_effect = aiosmtplib.SMTPConnectError("connection refused")
            return smtp

        monkeypatch.setattr(aiosmtplib, "SMTP", unreachable_smtp)

        with pytest.raises(SendError, match="SMTPConnectError"):
            await email_sender.send("u@x.com", "hi")

    @pytest.mark.asyncio
    async def test_missing_sender_address_fails(self, fake_smtp):
        sender = SmtpEmailSender(
            hostname="localhost", port=25, username=None, password=None, sender=None, subject="Hi"
        )

        with pytest.raises(SendError, match="not configured"):
            await sender.send("u@x.com", "hi")

        assert fake_smtp.instances == []


@pytest.mark.unit
class TestChannelRegistry:
    """Test suite for channel routing."""

    def test_routes_to_registered_sender(self):
        sender = FakeSender(ChannelType.SMS)
        registry = ChannelRegistry([sender])

        assert registry.get("sms") is sender
        assert "sms" in registry
        assert registry.channels == frozenset({ChannelType.SMS})

    def test_unregistered_channel_raises(self):
        registry = ChannelRegistry([FakeSender(ChannelType.SMS)])

        with pytest.raises(UnsupportedChannelError) as exc_info:
            registry.get("email")

        assert exc_info.value.channel == "email"
        assert "email" not in registry

    def test_unknown_channel_tag_raises(self):
        registry = ChannelRegistry([FakeSender(ChannelType.SMS)])

        with pytest.raises(UnsupportedChannelError):
            registry.get("pigeon")
        assert "pigeon" not in registry

    def test_default_registry_serves_every_channel(self):
        registry = build_channel_registry(ChannelSettings())

        assert registry.channels == frozenset(ChannelType)
        assert all(isinstance(registry.get(channel), ChannelSender) for channel in ChannelType)
