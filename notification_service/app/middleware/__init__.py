"""ASGI middleware."""

from __future__ import annotations

from notification_service.app.middleware.request_id import RequestIDMiddleware

__all__ = ["RequestIDMiddleware"]
