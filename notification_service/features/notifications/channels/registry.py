"""Channel-to-sender routing."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from notification_service.core.exceptions import UnsupportedChannelError
from notification_service.features.notifications.channels.email import SmtpEmailSender
from notification_service.features.notifications.channels.twilio import TwilioMessagingSender
from notification_service.features.notifications.models import ChannelType

if TYPE_CHECKING:
    from collections.abc import Iterable

    from notification_service.core.settings.channels import ChannelSettings
    from notification_service.features.notifications.channels.base import ChannelSender

logger = logging.getLogger(__name__)


class ChannelRegistry:
    """Maps each ``ChannelType`` to the sender that serves it."""

    def __init__(self, senders: Iterable[ChannelSender] = ()) -> None:
        self._senders: dict[ChannelType, ChannelSender] = {}
        for sender in senders:
            self.register(sender)

    def register(self, sender: ChannelSender) -> None:
        self._senders[ChannelType(sender.channel)] = sender

    def get(self, channel: str) -> ChannelSender:
        """Return the sender for a channel tag.

        Raises:
            UnsupportedChannelError: The tag is not a known channel, or no
                sender is registered for it.
        """
        try:
            return self._senders[ChannelType(channel)]
        except (ValueError, KeyError):
            raise UnsupportedChannelError(channel) from None

    def __contains__(self, channel: object) -> bool:
        try:
            return ChannelType(channel) in self._senders
        except ValueError:
            return False

    @property
    def channels(self) -> frozenset[ChannelType]:
        return frozenset(self._senders)


def build_channel_registry(settings: ChannelSettings) -> ChannelRegistry:
    """Wire the default senders: Twilio SMS, Twilio WhatsApp and SMTP email."""
    if not settings.twilio_configured:
        logger.warning("Twilio credentials missing; SMS and WhatsApp sends will fail")
    if not settings.email_sender:
        logger.warning("SMTP sender missing; email sends will fail")
    return ChannelRegistry(
        [
            TwilioMessagingSender.from_settings(ChannelType.SMS, settings),
            TwilioMessagingSender.from_settings(ChannelType.WHATSAPP, settings),
            SmtpEmailSender.from_settings(settings),
        ],
    )
