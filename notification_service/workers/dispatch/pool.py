"""Bounded concurrency for dispatch processing.

At most ``max_workers`` deliveries are processed at once. When every slot is
busy, the ``wait`` policy blocks the consumer until one frees up (the broker
prefetch then stops further deliveries), while the ``requeue`` policy gives
up after ``acquire_timeout`` and hands the message back to the broker.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from notification_service.infra.metrics.tracking import (
    set_pool_in_flight,
    track_dispatch_outcome,
    track_pool_saturated,
)
from notification_service.workers.dispatch.processor import DispatchOutcome

if TYPE_CHECKING:
    from notification_service.core.settings.dispatch import SaturationPolicy
    from notification_service.workers.dispatch.processor import Delivery, DispatchProcessor

logger = logging.getLogger(__name__)


class DispatchWorkerPool:
    """Semaphore-bounded pool running ``DispatchProcessor.process``.

    Example:
        pool = DispatchWorkerPool(processor, max_workers=16)
        outcome = await pool.submit(delivery)
        ...
        await pool.drain(timeout=30)
    """

    def __init__(
        self,
        processor: DispatchProcessor,
        *,
        max_workers: int = 16,
        saturation_policy: SaturationPolicy = "wait",
        acquire_timeout: float = 5.0,
    ) -> None:
        if max_workers < 1:
            msg = "max_workers must be at least 1"
            raise ValueError(msg)
        if saturation_policy not in ("wait", "requeue"):
            msg = f"Unknown saturation policy: {saturation_policy!r}"
            raise ValueError(msg)
        self.processor = processor
        self.max_workers = max_workers
        self.saturation_policy = saturation_policy
        self.acquire_timeout = acquire_timeout
        self._semaphore = asyncio.Semaphore(max_workers)
        self._tasks: set[asyncio.Task[DispatchOutcome]] = set()
        self._in_flight = 0
        self._closed = False

    @property
    def in_flight(self) -> int:
        """Deliveries currently being processed."""
        return self._in_flight

    @property
    def closed(self) -> bool:
        return self._closed

    async def submit(self, delivery: Delivery) -> DispatchOutcome:
        """Process a delivery once a slot is free and return its outcome.

        The processing task is shielded: cancelling the caller (for example
        the consumer during shutdown) does not abort a dispatch midway, and
        ``drain`` still waits for it.
        """
        if self._closed:
            return await self._requeue(delivery, "pool is draining")

        if not await self._acquire():
            track_pool_saturated()
            return await self._requeue(delivery, "pool saturated")
        if self._closed:
            # Drain started while this delivery waited for a slot.
            self._semaphore.release()
            return await self._requeue(delivery, "pool is draining")

        task = asyncio.create_task(self._run(delivery))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return await asyncio.shield(task)

    async def _acquire(self) -> bool:
        if self.saturation_policy == "wait":
            await self._semaphore.acquire()
            return True
        try:
            async with asyncio.timeout(self.acquire_timeout):
                await self._semaphore.acquire()
        except TimeoutError:
            return False
        return True

    async def _run(self, delivery: Delivery) -> DispatchOutcome:
        self._in_flight += 1
        set_pool_in_flight(self._in_flight)
        try:
            return await self.processor.process(delivery)
        except Exception:
            logger.exception("Unexpected error during dispatch, requeueing message")
            await self._nack_requeue(delivery)
            track_dispatch_outcome(DispatchOutcome.REQUEUED.value)
            return DispatchOutcome.REQUEUED
        finally:
            self._in_flight -= 1
            set_pool_in_flight(self._in_flight)
            self._semaphore.release()

    async def _requeue(self, delivery: Delivery, reason: str) -> DispatchOutcome:
        logger.warning("Requeueing delivery: %s", reason, extra={"in_flight": self._in_flight})
        await self._nack_requeue(delivery)
        track_dispatch_outcome(DispatchOutcome.REQUEUED.value)
        return DispatchOutcome.REQUEUED

    @staticmethod
    async def _nack_requeue(delivery: Delivery) -> None:
        try:
            await delivery.nack(requeue=True)
        except Exception:
            # The broker redelivers unacknowledged messages when the channel closes.
            logger.exception("Failed to nack delivery")

    async def drain(self, timeout: float | None = None) -> bool:
        """Stop accepting deliveries and wait for in-flight ones.

        Returns:
            True if every in-flight delivery finished within ``timeout``.
        """
        self._closed = True
        pending = set(self._tasks)
        if not pending:
            return True
        logger.info("Draining dispatch pool", extra={"in_flight": len(pending), "timeout": timeout})
        _, still_running = await asyncio.wait(pending, timeout=timeout)
        if still_running:
            logger.warning("Dispatch pool drain timed out", extra={"still_running": len(still_running)})
            return False
        return True
