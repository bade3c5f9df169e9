"""ASGI entry point: ``uvicorn notification_service.main:create_app --factory``."""

from __future__ import annotations

from notification_service.app.main import create_app

__all__ = ["create_app"]
