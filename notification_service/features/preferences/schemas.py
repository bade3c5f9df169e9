"""Pydantic schemas for notification preferences."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, RootModel, field_validator

from notification_service.features.notifications.models import ChannelType


class PreferenceRecord(BaseModel):
    """One ``{channel, enabled}`` pair.

    ``channel`` is free text on read so that records written by other
    systems for channels this service does not know still round-trip.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    channel: str = Field(..., min_length=1, max_length=32)
    enabled: bool


class PreferenceItem(BaseModel):
    """One entry of a replacement payload."""

    channel: ChannelType
    enabled: bool


class PreferenceReplace(RootModel[list[PreferenceItem]]):
    """Full preference set for a user; replaces whatever was stored."""

    @field_validator("root")
    @classmethod
    def _unique_channels(cls, value: list[PreferenceItem]) -> list[PreferenceItem]:
        seen: set[ChannelType] = set()
        for item in value:
            if item.channel in seen:
                msg = f"duplicate channel: {item.channel.value}"
                raise ValueError(msg)
            seen.add(item.channel)
        return value
