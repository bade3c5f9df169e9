"""Sender contract shared by every delivery channel."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from notification_service.features.notifications.models import ChannelType


@dataclass(frozen=True, slots=True)
class SendReceipt:
    """Provider acknowledgement of a handed-off notification.

    Attributes:
        channel: Channel the notification went out on.
        provider_message_id: Identifier assigned by the provider (Twilio SID,
            SMTP Message-ID), when one is available.
    """

    channel: ChannelType
    provider_message_id: str | None = None


@runtime_checkable
class ChannelSender(Protocol):
    """Protocol for channel-specific senders.

    The dispatch worker picks a sender by the log's channel and is otherwise
    unaware of provider specifics.
    """

    channel: ChannelType

    async def send(self, recipient: str, body: str) -> SendReceipt:
        """Hand one notification to the provider.

        Raises:
            SendError: The provider rejected the message or could not be reached.
        """
        ...
