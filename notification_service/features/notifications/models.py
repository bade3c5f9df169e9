"""SQLAlchemy models for the notifications feature."""

from __future__ import annotations

from enum import StrEnum

from sqlalchemy import Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from notification_service.core.database import Base, IntegerPKMixin, TimestampMixin


class ChannelType(StrEnum):
    """Closed set of delivery channels with a registered sender."""

    SMS = "sms"
    EMAIL = "email"
    WHATSAPP = "whatsapp"


class NotificationStatus(StrEnum):
    """Lifecycle status of a notification log.

    ``PENDING`` is the only non-terminal status. Every other status is
    reached at most once and never left.
    """

    PENDING = "PENDING"
    SENT = "SENT"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"
    UNSUPPORTED = "UNSUPPORTED"

    @property
    def is_terminal(self) -> bool:
        return self is not NotificationStatus.PENDING


class NotificationLog(Base, IntegerPKMixin, TimestampMixin):
    """One record per accepted notification request.

    ``channel`` is stored as free text rather than a database enum so that a
    row naming a channel this process cannot serve is still readable and can
    be closed out as ``UNSUPPORTED``.
    """

    __tablename__ = "notification_logs"

    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    channel: Mapped[str] = mapped_column(String(32), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    recipient: Mapped[str] = mapped_column(String(320), nullable=False)
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=NotificationStatus.PENDING.value,
        server_default=NotificationStatus.PENDING.value,
    )
    error: Mapped[str | None] = mapped_column(Text, nullable=True, comment="Last send error")
    attempts: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
        comment="Send attempts made",
    )

    __table_args__ = (Index("ix_notification_logs_status", "status"),)

    @property
    def status_enum(self) -> NotificationStatus:
        return NotificationStatus(self.status)

    @property
    def is_terminal(self) -> bool:
        return self.status_enum.is_terminal

    def __repr__(self) -> str:
        return f"<NotificationLog(id={self.id}, channel={self.channel}, status={self.status})>"
