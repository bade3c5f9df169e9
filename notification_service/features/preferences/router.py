"""API router for user notification preferences.

Endpoints:
    GET /users/{user_id}/preferences  - List the user's {channel, enabled} pairs
    PUT /users/{user_id}/preferences  - Replace the full set
"""

from __future__ import annotations

from fastapi import APIRouter, Path

from notification_service.core.schemas import ProblemDetails, ValidationProblemDetails
from notification_service.features.preferences.dependencies import PreferenceServiceDep
from notification_service.features.preferences.schemas import PreferenceRecord, PreferenceReplace

router = APIRouter(prefix="/users", tags=["preferences"])

UserIdPath = Path(..., min_length=1, max_length=255)


@router.get(
    "/{user_id}/preferences",
    response_model=list[PreferenceRecord],
    summary="Get a user's preferences",
    responses={404: {"model": ProblemDetails, "description": "User has no preferences"}},
)
async def get_preferences(
    service: PreferenceServiceDep,
    user_id: str = UserIdPath,
) -> list[PreferenceRecord]:
    return await service.get_for_user(user_id)


@router.put(
    "/{user_id}/preferences",
    response_model=list[PreferenceRecord],
    summary="Replace a user's preferences",
    description="Delete every stored preference for the user and insert the given set atomically.",
    responses={400: {"model": ValidationProblemDetails, "description": "Invalid or duplicate channels"}},
)
async def replace_preferences(
    payload: PreferenceReplace,
    service: PreferenceServiceDep,
    user_id: str = UserIdPath,
) -> list[PreferenceRecord]:
    return await service.replace_for_user(user_id, payload)
