"""FastAPI dependencies bridging the service container into route handlers."""

from __future__ import annotations

from notification_service.core.dependencies.container import ContainerDep, get_container
from notification_service.core.dependencies.database import SessionDep, get_db_session

__all__ = ["ContainerDep", "SessionDep", "get_container", "get_db_session"]
