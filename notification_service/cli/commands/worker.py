"""Run the dispatch worker."""

from __future__ import annotations

from dataclasses import replace
import logging

import click
from faststream import FastStream

from notification_service.cli.utils import coro, info
from notification_service.core.container import build_container
from notification_service.core.settings import get_settings
from notification_service.infra.logging import setup_logging

logger = logging.getLogger(__name__)


@click.command()
@click.option("--max-workers", default=None, type=int, help="Concurrent dispatches (default: DISPATCH_MAX_WORKERS)")
@coro
async def worker(max_workers: int | None) -> None:
    """Consume the notifications queue and deliver through the channel senders."""
    settings = get_settings()
    setup_logging(settings.logging)

    if max_workers is not None:
        dispatch = settings.dispatch.model_copy(update={"max_workers": max_workers})
        settings = replace(settings, dispatch=dispatch)

    container = build_container(settings)
    pool = container.attach_dispatch_worker()
    app = FastStream(container.broker, logger=logger)

    @app.on_shutdown
    async def stop_dispatch() -> None:
        await container.stop_dispatch()

    @app.after_shutdown
    async def release_resources() -> None:
        await container.shutdown()

    info(
        f"Dispatch worker consuming '{settings.rabbit.queue_name}' "
        f"with {pool.max_workers} workers ({pool.saturation_policy} when saturated)",
    )
    await app.run()
