"""Router registry and setup."""

from __future__ import annotations

from typing import TYPE_CHECKING

from notification_service.features.health.router import router as health_router
from notification_service.features.metrics.router import router as metrics_router
from notification_service.features.notifications.router import router as notifications_router
from notification_service.features.preferences.router import router as preferences_router

if TYPE_CHECKING:
    from fastapi import FastAPI

    from notification_service.core.settings.app import AppSettings


def setup_routers(app: FastAPI, app_settings: AppSettings) -> None:
    """Register all feature routers.

    Health and metrics are served at the root; feature routes under the
    API prefix (``/v1`` by default).
    """
    app.include_router(metrics_router)
    app.include_router(health_router)

    api_prefix = app_settings.api_prefix
    app.include_router(notifications_router, prefix=api_prefix)
    app.include_router(preferences_router, prefix=api_prefix)
