"""Helpers that record pipeline events on the Prometheus metrics.

Call sites use these functions instead of touching metric objects directly,
which keeps label spelling in one place.
"""

from __future__ import annotations

from notification_service.infra.metrics.prometheus import (
    dispatch_outcomes_total,
    dispatch_pool_in_flight,
    dispatch_pool_saturated_total,
    notifications_ingested_total,
    notifications_rejected_total,
    rate_limit_checks_total,
    send_attempts_total,
    send_duration_seconds,
)


def track_ingested(channel: str) -> None:
    notifications_ingested_total.labels(channel=channel).inc()


def track_rejected(reason: str) -> None:
    notifications_rejected_total.labels(reason=reason).inc()


def track_rate_limit_check(allowed: bool) -> None:
    rate_limit_checks_total.labels(allowed=str(allowed).lower()).inc()


def track_dispatch_outcome(outcome: str) -> None:
    dispatch_outcomes_total.labels(outcome=outcome).inc()


def track_send_attempt(channel: str) -> None:
    send_attempts_total.labels(channel=channel).inc()


def observe_send_duration(channel: str, seconds: float) -> None:
    send_duration_seconds.labels(channel=channel).observe(seconds)


def set_pool_in_flight(count: int) -> None:
    dispatch_pool_in_flight.set(count)


def track_pool_saturated() -> None:
    dispatch_pool_saturated_total.inc()
