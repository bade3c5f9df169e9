"""Prometheus metrics for the ingestion and dispatch pipeline."""

from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

# Custom registry so tests and multiple app instances don't collide with the default one
REGISTRY = CollectorRegistry()

# Covers provider round-trips from 10ms to 30s
SEND_LATENCY_BUCKETS = (0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0)

notifications_ingested_total = Counter(
    "notifications_ingested_total",
    "Notification requests accepted and queued",
    ["channel"],
    registry=REGISTRY,
)

notifications_rejected_total = Counter(
    "notifications_rejected_total",
    "Notification requests rejected at ingestion",
    ["reason"],
    registry=REGISTRY,
)

rate_limit_checks_total = Counter(
    "notification_rate_limit_checks_total",
    "Rate limit decisions on the ingestion endpoint",
    ["allowed"],
    registry=REGISTRY,
)

dispatch_outcomes_total = Counter(
    "notification_dispatch_outcomes_total",
    "Dispatch outcomes by kind",
    ["outcome"],
    registry=REGISTRY,
)

send_duration_seconds = Histogram(
    "notification_send_duration_seconds",
    "Channel sender call duration in seconds",
    ["channel"],
    buckets=SEND_LATENCY_BUCKETS,
    registry=REGISTRY,
)

send_attempts_total = Counter(
    "notification_send_attempts_total",
    "Channel send attempts, including retries",
    ["channel"],
    registry=REGISTRY,
)

dispatch_pool_in_flight = Gauge(
    "dispatch_pool_in_flight",
    "Deliveries currently being processed by the worker pool",
    registry=REGISTRY,
)

dispatch_pool_saturated_total = Counter(
    "dispatch_pool_saturated_total",
    "Deliveries handed back to the broker because the pool was full",
    registry=REGISTRY,
)
