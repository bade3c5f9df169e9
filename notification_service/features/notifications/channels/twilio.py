"""SMS and WhatsApp delivery through the Twilio Messaging API.

The Twilio SDK is synchronous, so each request runs in a worker thread to
keep the event loop free for other dispatches.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from twilio.base.exceptions import TwilioException, TwilioRestException
from twilio.http.http_client import TwilioHttpClient
from twilio.rest import Client

from notification_service.core.exceptions import SendError
from notification_service.features.notifications.channels.base import SendReceipt
from notification_service.features.notifications.models import ChannelType

if TYPE_CHECKING:
    from notification_service.core.settings.channels import ChannelSettings

logger = logging.getLogger(__name__)

WHATSAPP_PREFIX = "whatsapp:"


class TwilioMessagingSender:
    """Sends text messages through Twilio.

    SMS and WhatsApp share this class. The WhatsApp instance adds the
    ``whatsapp:`` prefix to both the recipient and the sender number and uses
    its own sender identity.

    Example:
        sender = TwilioMessagingSender.from_settings(ChannelType.WHATSAPP, settings)
        receipt = await sender.send("+15551234567", "Your order shipped")
    """

    def __init__(
        self,
        channel: ChannelType,
        *,
        client: Client | None,
        from_number: str | None,
        address_prefix: str = "",
    ) -> None:
        self.channel = channel
        self.client = client
        self.from_number = from_number
        self.address_prefix = address_prefix

    @classmethod
    def from_settings(cls, channel: ChannelType, settings: ChannelSettings) -> TwilioMessagingSender:
        if channel not in (ChannelType.SMS, ChannelType.WHATSAPP):
            msg = f"Twilio does not serve the {channel} channel"
            raise ValueError(msg)

        client = None
        if settings.twilio_configured:
            client = Client(
                settings.twilio_account_sid,
                settings.twilio_auth_token.get_secret_value(),
                http_client=TwilioHttpClient(timeout=settings.send_timeout),
            )

        if channel is ChannelType.WHATSAPP:
            return cls(
                channel,
                client=client,
                from_number=settings.twilio_whatsapp_from,
                address_prefix=WHATSAPP_PREFIX,
            )
        return cls(channel, client=client, from_number=settings.twilio_sms_from)

    def _address(self, number: str) -> str:
        if not self.address_prefix or number.startswith(self.address_prefix):
            return number
        return f"{self.address_prefix}{number}"

    async def send(self, recipient: str, body: str) -> SendReceipt:
        if self.client is None or not self.from_number:
            raise SendError(self.channel, "twilio credentials or sender number not configured")

        to = self._address(recipient)
        from_ = self._address(self.from_number)
        try:
            message = await asyncio.to_thread(
                self.client.messages.create,
                to=to,
                from_=from_,
                body=body,
            )
        except TwilioRestException as e:
            raise SendError(self.channel, e.msg, provider_code=str(e.code) if e.code else None) from e
        except (TwilioException, OSError) as e:
            raise SendError(self.channel, f"{type(e).__name__}: {e}") from e

        logger.info(
            "Twilio message created",
            extra={"channel": self.channel.value, "sid": message.sid, "provider_status": message.status},
        )
        return SendReceipt(channel=self.channel, provider_message_id=message.sid)
