"""Prometheus metrics endpoint.

Endpoints:
    GET /metrics - Prometheus scrape endpoint

Metrics Exposed:
    - notifications_ingested_total{channel}
    - notifications_rejected_total{reason}
    - notification_rate_limit_checks_total{allowed}
    - notification_dispatch_outcomes_total{outcome}
    - notification_send_attempts_total{channel}
    - notification_send_duration_seconds{channel}
    - dispatch_pool_in_flight
    - dispatch_pool_saturated_total
"""

from __future__ import annotations

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from notification_service.infra.metrics.prometheus import REGISTRY

router = APIRouter(tags=["observability"])


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    """Expose the service registry in the Prometheus text format."""
    return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)
