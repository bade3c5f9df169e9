"""Async database engine and session management."""

from __future__ import annotations

from notification_service.infra.database.session import Database, create_database

__all__ = ["Database", "create_database"]
