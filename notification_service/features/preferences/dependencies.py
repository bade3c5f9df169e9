"""FastAPI dependencies for the preferences feature."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from notification_service.core.dependencies import SessionDep
from notification_service.features.preferences.service import PreferenceService


def get_preference_service(session: SessionDep) -> PreferenceService:
    return PreferenceService(session)


PreferenceServiceDep = Annotated[PreferenceService, Depends(get_preference_service)]
