"""API router for notification ingestion and status.

Endpoints:
    POST /notifications            - Accept a notification for delivery (202)
    GET  /notifications/{log_id}   - Current status of a notification
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, status

from notification_service.core.database import NotFoundError
from notification_service.core.dependencies import SessionDep
from notification_service.core.exceptions import NotFoundException
from notification_service.core.schemas import ProblemDetails, ValidationProblemDetails
from notification_service.features.notifications.dependencies import ClientKeyDep, IngestionGatewayDep
from notification_service.features.notifications.repository import get_notification_log_repository
from notification_service.features.notifications.schemas import (
    NotificationAccepted,
    NotificationLogRead,
    NotificationRequest,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])
logger = logging.getLogger(__name__)


@router.post(
    "",
    response_model=NotificationAccepted,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Submit a notification",
    description="Validate, rate limit and opt-in check a notification, then queue it for delivery.",
    responses={
        400: {"model": ValidationProblemDetails, "description": "Invalid request or user not opted in"},
        429: {"model": ProblemDetails, "description": "Rate limit exceeded"},
        500: {"model": ProblemDetails, "description": "Internal failure"},
    },
)
async def submit_notification(
    payload: NotificationRequest,
    gateway: IngestionGatewayDep,
    client_key: ClientKeyDep,
) -> NotificationAccepted:
    """Accept a notification; delivery happens asynchronously."""
    return await gateway.submit(payload, client_key)


@router.get(
    "/{log_id}",
    response_model=NotificationLogRead,
    summary="Get notification status",
    responses={404: {"model": ProblemDetails, "description": "Notification not found"}},
)
async def get_notification(log_id: int, session: SessionDep) -> NotificationLogRead:
    repository = get_notification_log_repository()
    try:
        log = await repository.get_or_raise(session, log_id)
    except NotFoundError as e:
        raise NotFoundException(
            detail=f"Notification {log_id} not found",
            extra={"log_id": log_id},
        ) from e
    return NotificationLogRead.model_validate(log)
