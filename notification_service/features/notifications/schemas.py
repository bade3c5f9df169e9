"""Pydantic schemas for the notifications feature."""

from __future__ import annotations

from datetime import datetime
import json
import re
from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictInt, ValidationError, model_validator

from notification_service.core.exceptions import MalformedMessageError
from notification_service.features.notifications.models import ChannelType, NotificationStatus

_PHONE_RE = re.compile(r"^\+[1-9]\d{6,14}$")


class NotificationRequest(BaseModel):
    """Ingestion request body.

    ``channel`` also accepts ``type``, the field name older clients send.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    user_id: str = Field(..., min_length=1, max_length=255, description="Target user identifier")
    channel: ChannelType = Field(
        ...,
        validation_alias=AliasChoices("channel", "type"),
        description="Delivery channel: sms, email or whatsapp",
    )
    message: str = Field(..., min_length=1, max_length=4096, description="Notification body")
    recipient: str = Field(
        ...,
        min_length=1,
        max_length=320,
        description="Email address or E.164 phone number, depending on channel",
    )

    @model_validator(mode="after")
    def _recipient_matches_channel(self) -> NotificationRequest:
        if self.channel is ChannelType.EMAIL:
            local, _, domain = self.recipient.partition("@")
            if not local or not domain:
                msg = "recipient must be an email address for the email channel"
                raise ValueError(msg)
        elif not _PHONE_RE.match(self.recipient):
            msg = f"recipient must be an E.164 phone number (+<digits>) for the {self.channel.value} channel"
            raise ValueError(msg)
        return self


class NotificationAccepted(BaseModel):
    """202 response body."""

    status: Literal["Notification accepted"] = "Notification accepted"
    log_id: int


class NotificationLogRead(BaseModel):
    """Notification log as returned by the status endpoint."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    channel: str
    message: str
    recipient: str
    status: NotificationStatus
    error: str | None = None
    attempts: int = 0
    created_at: datetime
    updated_at: datetime


class DispatchMessage(BaseModel):
    """Queue payload: a reference to a notification log, never a copy of it."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    # Bounded to the 32-bit integer primary key column.
    notification_log_id: StrictInt = Field(..., gt=0, le=2**31 - 1)

    @classmethod
    def decode(cls, body: bytes | str) -> DispatchMessage:
        """Parse a raw queue body.

        Raises:
            MalformedMessageError: If the body is not JSON or the id is missing,
                non-integer or outside the primary key range.
        """
        try:
            data = json.loads(body)
        except (UnicodeDecodeError, ValueError) as e:
            msg = f"Undecodable dispatch message: {e}"
            raise MalformedMessageError(msg) from e
        if not isinstance(data, dict):
            msg = "Dispatch message must be a JSON object"
            raise MalformedMessageError(msg)
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            msg = f"Invalid dispatch message: {e.errors(include_url=False)}"
            raise MalformedMessageError(msg) from e
