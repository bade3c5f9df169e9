"""Database base classes and repository helpers."""

from __future__ import annotations

from notification_service.core.database.base import Base, IntegerPKMixin, TimestampMixin
from notification_service.core.database.exceptions import NotFoundError, RepositoryError
from notification_service.core.database.repository import BaseRepository

__all__ = [
    "Base",
    "BaseRepository",
    "IntegerPKMixin",
    "NotFoundError",
    "RepositoryError",
    "TimestampMixin",
]
