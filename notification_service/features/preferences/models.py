"""SQLAlchemy models for notification preferences."""

from __future__ import annotations

from sqlalchemy import Boolean, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from notification_service.core.database import Base, IntegerPKMixin, TimestampMixin


class Preference(Base, IntegerPKMixin, TimestampMixin):
    """Whether a user accepts notifications on one channel.

    No row for a (user, channel) pair means disabled.
    """

    __tablename__ = "preferences"

    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    channel: Mapped[str] = mapped_column(String(32), nullable=False)
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (UniqueConstraint("user_id", "channel", name="uq_preferences_user_id_channel"),)

    def __repr__(self) -> str:
        return f"<Preference(user_id={self.user_id}, channel={self.channel}, enabled={self.enabled})>"
