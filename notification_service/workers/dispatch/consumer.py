"""FastStream subscriber feeding the dispatch worker pool.

Messages are passed through undecoded so that a malformed payload reaches
``DispatchProcessor``, which discards it explicitly. The processor acks or
nacks every message itself; FastStream only acknowledges on our behalf if a
handler returns without having done so.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from faststream.rabbit.annotations import RabbitMessage

if TYPE_CHECKING:
    from faststream.rabbit import RabbitBroker, RabbitQueue
    from faststream.rabbit.subscriber.asyncapi import AsyncAPISubscriber
    from faststream.rabbit.message import RabbitMessage as IncomingMessage

    from notification_service.workers.dispatch.pool import DispatchWorkerPool

logger = logging.getLogger(__name__)


async def raw_body_decoder(message: IncomingMessage) -> bytes:
    """Hand the handler the raw body instead of FastStream's JSON decoding."""
    return message.body


def register_dispatch_consumer(
    broker: RabbitBroker,
    queue: RabbitQueue,
    pool: DispatchWorkerPool,
) -> AsyncAPISubscriber:
    """Subscribe the worker pool to the notifications queue.

    Must be called before the broker starts. The returned subscriber is what
    ``stop_consuming`` cancels at shutdown.
    """
    subscriber = broker.subscriber(queue, decoder=raw_body_decoder, no_ack=False, retry=False)

    @subscriber
    async def consume_dispatch_message(body: bytes, message: RabbitMessage) -> None:  # noqa: ARG001
        await pool.submit(message)

    logger.info(
        "Dispatch consumer registered",
        extra={"queue": queue.name, "max_workers": pool.max_workers, "policy": pool.saturation_policy},
    )
    return subscriber


async def stop_consuming(subscriber: AsyncAPISubscriber) -> None:
    """Cancel the queue consumer so no new deliveries arrive while the pool drains.

    Deliveries already prefetched but not acknowledged go back to the queue
    when the channel closes. Errors are logged, not raised.
    """
    try:
        await subscriber.close()
    except Exception as e:
        logger.exception("Error cancelling dispatch consumer", extra={"error": str(e)})
        return
    logger.info("Dispatch consumer cancelled")
