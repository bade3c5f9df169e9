"""Application lifespan management.

Startup order:
1. Logging
2. Service container (database, Redis, broker, ingestion gateway)
3. Optional in-process dispatch worker
4. Broker connection

Shutdown runs in reverse: drain dispatches, close broker, release clients.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import TYPE_CHECKING

from notification_service.core.container import build_container
from notification_service.core.settings import get_settings
from notification_service.infra.logging import setup_logging

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the service container and tie it to the application lifetime.

    A container already placed on ``app.state`` (tests do this) is used as
    is and not shut down here.
    """
    settings = get_settings()
    setup_logging(settings.logging)

    container = getattr(app.state, "container", None)
    owns_container = container is None
    if owns_container:
        container = build_container(settings)
        if settings.app.run_dispatch_worker:
            container.attach_dispatch_worker()
        app.state.container = container
        await container.startup()

    logger.info(
        "Application started",
        extra={
            "service": settings.app.service_name,
            "version": settings.app.version,
            "environment": settings.app.environment,
            "dispatch_worker": container.pool is not None,
        },
    )
    try:
        yield
    finally:
        if owns_container:
            await container.shutdown()
            app.state.container = None
        logger.info("Application stopped")
