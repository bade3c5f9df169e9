"""Email delivery over authenticated SMTP submission using aiosmtplib."""

from __future__ import annotations

from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formatdate, make_msgid
import html
import logging
from typing import TYPE_CHECKING

import aiosmtplib

from notification_service.core.exceptions import SendError
from notification_service.features.notifications.channels.base import SendReceipt
from notification_service.features.notifications.models import ChannelType

if TYPE_CHECKING:
    from notification_service.core.settings.channels import ChannelSettings

logger = logging.getLogger(__name__)


class SmtpEmailSender:
    """Sends a minimal HTML email per notification.

    A new SMTP connection is opened per send; aiosmtplib does not pool.

    Example:
        sender = SmtpEmailSender.from_settings(settings)
        await sender.send("user@example.com", "Your order shipped")
    """

    channel = ChannelType.EMAIL

    def __init__(
        self,
        *,
        hostname: str,
        port: int,
        username: str | None,
        password: str | None,
        sender: str | None,
        subject: str,
        start_tls: bool = True,
        timeout: float = 30.0,
    ) -> None:
        self.hostname = hostname
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender
        self.subject = subject
        self.start_tls = start_tls
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: ChannelSettings) -> SmtpEmailSender:
        return cls(
            hostname=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password.get_secret_value() if settings.smtp_password else None,
            sender=settings.email_sender,
            subject=settings.email_subject,
            start_tls=settings.smtp_start_tls,
            timeout=settings.send_timeout,
        )

    def build_message(self, recipient: str, body: str) -> MIMEMultipart:
        """Build the MIME message: text part plus ``<html><body>`` part."""
        message = MIMEMultipart("alternative")
        message["Subject"] = self.subject
        message["From"] = self.sender or ""
        message["To"] = recipient
        message["Date"] = formatdate(localtime=False)
        message["Message-ID"] = make_msgid()
        message.attach(MIMEText(body, "plain", "utf-8"))
        message.attach(MIMEText(f"<html><body>{html.escape(body)}</body></html>", "html", "utf-8"))
        return message

    async def send(self, recipient: str, body: str) -> SendReceipt:
        if not self.sender:
            raise SendError(self.channel, "SMTP sender address not configured")

        message = self.build_message(recipient, body)
        smtp = aiosmtplib.SMTP(
            hostname=self.hostname,
            port=self.port,
            start_tls=self.start_tls,
            timeout=self.timeout,
        )
        try:
            async with smtp:
                if self.username and self.password:
                    await smtp.login(self.username, self.password)
                errors, response = await smtp.send_message(message)
        except aiosmtplib.SMTPResponseException as e:
            raise SendError(self.channel, e.message, provider_code=str(e.code)) from e
        except (aiosmtplib.SMTPException, OSError) as e:
            raise SendError(self.channel, f"{type(e).__name__}: {e}") from e

        if recipient in errors:
            code, reason = errors[recipient]
            raise SendError(self.channel, f"recipient refused: {reason}", provider_code=str(code))

        message_id = message["Message-ID"]
        logger.info("Email sent", extra={"message_id": message_id, "smtp_response": response})
        return SendReceipt(channel=self.channel, provider_message_id=message_id)
