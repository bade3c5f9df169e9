"""Delivery channel senders."""

from __future__ import annotations

from notification_service.features.notifications.channels.base import ChannelSender, SendReceipt
from notification_service.features.notifications.channels.email import SmtpEmailSender
from notification_service.features.notifications.channels.registry import ChannelRegistry, build_channel_registry
from notification_service.features.notifications.channels.twilio import TwilioMessagingSender

__all__ = [
    "ChannelRegistry",
    "ChannelSender",
    "SendReceipt",
    "SmtpEmailSender",
    "TwilioMessagingSender",
    "build_channel_registry",
]
