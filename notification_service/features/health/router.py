"""Health endpoints.

Endpoints:
    GET /health        - Liveness: the process is serving requests
    GET /health/ready  - Readiness: database, broker and rate limiter store
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError

from notification_service.core.dependencies import ContainerDep
from notification_service.infra.messaging import check_broker_health

router = APIRouter(prefix="/health", tags=["health"])
logger = logging.getLogger(__name__)


@router.get("", summary="Liveness probe")
async def liveness(container: ContainerDep) -> dict[str, Any]:
    app = container.settings.app
    return {"status": "ok", "service": app.service_name, "version": app.version}


@router.get("/ready", summary="Readiness probe")
async def readiness(container: ContainerDep) -> JSONResponse:
    checks: dict[str, Any] = {"database": {"status": "healthy" if await container.database.ping() else "unhealthy"}}

    if container.settings.rabbit.enabled:
        checks["broker"] = await check_broker_health(container.broker)

    if container.redis is not None:
        try:
            await container.redis.ping()
            checks["redis"] = {"status": "healthy"}
        except (RedisError, OSError) as e:
            logger.warning("Redis ping failed", extra={"error": str(e)})
            checks["redis"] = {"status": "unhealthy"}

    ready = all(check["status"] == "healthy" for check in checks.values())
    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "ready" if ready else "not_ready", "checks": checks},
    )
