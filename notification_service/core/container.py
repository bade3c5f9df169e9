"""Explicitly constructed service dependencies.

Every shared client (database engine, Redis, broker) is built once here and
injected into the components that use it; nothing lives in module globals.
The API process and the dispatch worker build the same container and differ
only in whether the dispatch consumer is attached.

Example:
    container = build_container(get_settings())
    container.attach_dispatch_worker()
    await container.startup()
    ...
    await container.shutdown()
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING

from notification_service.features.notifications.channels import build_channel_registry
from notification_service.features.notifications.service import IngestionGateway
from notification_service.features.preferences.store import HttpPreferenceStore, create_preference_store
from notification_service.infra.cache import create_redis_client
from notification_service.infra.database import create_database
from notification_service.infra.messaging import (
    NotificationPublisher,
    build_notifications_queue,
    create_broker,
    start_broker,
    stop_broker,
)
from notification_service.infra.ratelimit import FixedWindowRateLimiter
from notification_service.workers.dispatch import (
    DispatchProcessor,
    DispatchWorkerPool,
    register_dispatch_consumer,
    stop_consuming,
)

if TYPE_CHECKING:
    from faststream.rabbit import RabbitBroker, RabbitQueue
    from faststream.rabbit.subscriber.asyncapi import AsyncAPISubscriber
    from redis.asyncio import Redis

    from notification_service.core.settings import Settings
    from notification_service.features.notifications.channels import ChannelRegistry
    from notification_service.features.preferences.store import PreferenceStore
    from notification_service.infra.database import Database

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Holds the process-wide collaborators and their lifecycle."""

    settings: Settings
    database: Database
    broker: RabbitBroker
    queue: RabbitQueue
    preference_store: PreferenceStore
    publisher: NotificationPublisher
    gateway: IngestionGateway
    redis: Redis | None = None
    rate_limiter: FixedWindowRateLimiter | None = None
    channels: ChannelRegistry | None = None
    processor: DispatchProcessor | None = None
    pool: DispatchWorkerPool | None = None
    subscriber: AsyncAPISubscriber | None = None
    _broker_started: bool = field(default=False, init=False, repr=False)

    def attach_dispatch_worker(self, channels: ChannelRegistry | None = None) -> DispatchWorkerPool:
        """Build the dispatch pipeline and subscribe it to the queue.

        Must be called before ``startup``.
        """
        if self.pool is not None:
            return self.pool
        dispatch = self.settings.dispatch
        self.channels = channels or build_channel_registry(self.settings.channels)
        self.processor = DispatchProcessor(
            database=self.database,
            preference_store=self.preference_store,
            channels=self.channels,
            send_max_attempts=dispatch.send_max_attempts,
            send_retry_delay=dispatch.send_retry_delay,
        )
        self.pool = DispatchWorkerPool(
            self.processor,
            max_workers=dispatch.max_workers,
            saturation_policy=dispatch.saturation_policy,
            acquire_timeout=dispatch.acquire_timeout,
        )
        self.subscriber = register_dispatch_consumer(self.broker, self.queue, self.pool)
        return self.pool

    async def startup(self) -> None:
        """Connect the broker. Database and Redis connect lazily."""
        if not self.settings.rabbit.enabled:
            logger.warning("RabbitMQ disabled; notifications cannot be enqueued")
            return
        await start_broker(self.broker, self.settings.rabbit)
        self._broker_started = True

    async def stop_dispatch(self) -> None:
        """Cancel the queue consumer, then wait for in-flight dispatches."""
        if self.subscriber is not None:
            await stop_consuming(self.subscriber)
            self.subscriber = None
        if self.pool is not None:
            await self.pool.drain(timeout=self.settings.dispatch.shutdown_timeout)

    async def shutdown(self) -> None:
        """Stop dispatching, then release connections in reverse order."""
        await self.stop_dispatch()
        if self._broker_started:
            await stop_broker(self.broker)
            self._broker_started = False
        if isinstance(self.preference_store, HttpPreferenceStore):
            await self.preference_store.close()
        if self.redis is not None:
            await self.redis.aclose()
        await self.database.dispose()
        logger.info("Service container shut down")


def build_container(settings: Settings) -> ServiceContainer:
    """Construct every collaborator from settings without connecting."""
    database = create_database(settings.db)
    preference_store = create_preference_store(settings.preferences, database)

    redis = None
    rate_limiter = None
    if settings.rate_limit.enabled:
        redis = create_redis_client(settings.redis)
        rate_limiter = FixedWindowRateLimiter(
            redis,
            limit=settings.rate_limit.limit,
            window=settings.rate_limit.window_seconds,
            key_prefix=settings.rate_limit.key_prefix,
        )
    else:
        logger.warning("Ingestion rate limiting disabled")

    broker = create_broker(settings.rabbit)
    queue = build_notifications_queue(settings.rabbit.queue_name)
    publisher = NotificationPublisher(broker, queue)

    gateway = IngestionGateway(
        database=database,
        preference_store=preference_store,
        publisher=publisher,
        rate_limiter=rate_limiter,
        timeout=settings.app.ingest_timeout,
    )
    return ServiceContainer(
        settings=settings,
        database=database,
        broker=broker,
        queue=queue,
        preference_store=preference_store,
        publisher=publisher,
        gateway=gateway,
        redis=redis,
        rate_limiter=rate_limiter,
    )
