"""Read access to opt-in preferences for the ingestion and dispatch pipeline.

Both the gateway and the dispatch worker depend on the ``PreferenceStore``
protocol only. Two backends exist:

* ``DatabasePreferenceStore`` reads the ``preferences`` table through the
  service's own database.
* ``HttpPreferenceStore`` calls a standalone preference service, where
  ``GET /v1/users/{id}/preferences`` answers 404 for a user with none.

Infrastructure failures surface as ``TransientDependencyError``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter, ValidationError
from sqlalchemy.exc import SQLAlchemyError

from notification_service.core.exceptions import TransientDependencyError
from notification_service.features.preferences.repository import PreferenceRepository, get_preference_repository
from notification_service.features.preferences.schemas import PreferenceRecord
from notification_service.infra.external import BaseHTTPClient

if TYPE_CHECKING:
    from notification_service.core.settings.preferences import PreferenceSettings
    from notification_service.infra.database import Database

logger = logging.getLogger(__name__)

_records_adapter = TypeAdapter(list[PreferenceRecord])


@runtime_checkable
class PreferenceStore(Protocol):
    """Read contract for preference lookups."""

    async def get_preferences(self, user_id: str) -> list[PreferenceRecord]:
        """Return every preference record for a user; empty when none exist."""
        ...

    async def is_opted_in(self, user_id: str, channel: str) -> bool:
        """True only for an explicit enabled record for this exact channel."""
        ...


def has_enabled(records: list[PreferenceRecord], channel: str) -> bool:
    return any(record.channel == channel and record.enabled for record in records)


class DatabasePreferenceStore:
    """Preference lookups against the service database."""

    def __init__(self, database: Database, repository: PreferenceRepository | None = None) -> None:
        self.database = database
        self.repository = repository or get_preference_repository()

    async def get_preferences(self, user_id: str) -> list[PreferenceRecord]:
        try:
            async with self.database.session() as session:
                rows = await self.repository.list_for_user(session, user_id)
        except (SQLAlchemyError, OSError) as e:
            raise TransientDependencyError("preference_store", str(e)) from e
        return [PreferenceRecord.model_validate(row) for row in rows]

    async def is_opted_in(self, user_id: str, channel: str) -> bool:
        try:
            async with self.database.session() as session:
                return await self.repository.is_enabled(session, user_id, channel)
        except (SQLAlchemyError, OSError) as e:
            raise TransientDependencyError("preference_store", str(e)) from e


class HttpPreferenceStore(BaseHTTPClient):
    """Preference lookups against the preference service over HTTP.

    Example:
        async with HttpPreferenceStore("http://preferences:8081") as store:
            await store.is_opted_in("user-1", "email")
    """

    async def get_preferences(self, user_id: str) -> list[PreferenceRecord]:
        path = f"/v1/users/{quote(user_id, safe='')}/preferences"
        try:
            response = await self.get(path)
        except httpx.HTTPError as e:
            raise TransientDependencyError("preference_service", f"{type(e).__name__}: {e}") from e

        if response.status_code == httpx.codes.NOT_FOUND:
            return []
        if response.status_code != httpx.codes.OK:
            raise TransientDependencyError(
                "preference_service",
                f"unexpected status {response.status_code}",
            )
        try:
            return _records_adapter.validate_json(response.content)
        except ValidationError as e:
            raise TransientDependencyError("preference_service", f"invalid response body: {e}") from e

    async def is_opted_in(self, user_id: str, channel: str) -> bool:
        return has_enabled(await self.get_preferences(user_id), channel)


def create_preference_store(settings: PreferenceSettings, database: Database) -> PreferenceStore:
    """Build the store selected by ``settings.backend``."""
    if settings.backend == "http":
        logger.info("Using HTTP preference store", extra={"service_url": settings.service_url})
        return HttpPreferenceStore(settings.service_url, timeout=settings.timeout)
    return DatabasePreferenceStore(database)
