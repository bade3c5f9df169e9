"""Dispatch worker: consumes the notifications queue and delivers."""

from __future__ import annotations

from notification_service.workers.dispatch.consumer import register_dispatch_consumer, stop_consuming
from notification_service.workers.dispatch.pool import DispatchWorkerPool
from notification_service.workers.dispatch.processor import Delivery, DispatchOutcome, DispatchProcessor

__all__ = [
    "Delivery",
    "DispatchOutcome",
    "DispatchProcessor",
    "DispatchWorkerPool",
    "register_dispatch_consumer",
    "stop_consuming",
]
