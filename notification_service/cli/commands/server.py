"""Run the ingestion API."""

from __future__ import annotations

import click
import uvicorn

from notification_service.cli.utils import info
from notification_service.core.settings import get_app_settings, get_logging_settings
from notification_service.infra.logging import setup_logging


@click.command()
@click.option("--host", default=None, help="Host to bind (default: APP_HOST)")
@click.option("--port", default=None, type=int, help="Port to bind (default: APP_PORT)")
@click.option("--reload/--no-reload", default=None, help="Auto-reload on code changes (default: APP_RELOAD)")
def serve(host: str | None, port: int | None, reload: bool | None) -> None:
    """Run the ingestion API with uvicorn.

    Set APP_RUN_DISPATCH_WORKER=true to also consume the queue in-process.
    """
    settings = get_app_settings()
    setup_logging(get_logging_settings())

    host = host or settings.host
    port = port or settings.port
    reload = settings.reload if reload is None else reload

    info(f"Serving {settings.title} at http://{host}:{port} ({settings.environment})")
    uvicorn.run(
        "notification_service.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_config=None,
    )
