"""Ingestion gateway: admission control in front of the dispatch queue.

``IngestionGateway.submit`` runs these steps in order, each one a possible
exit point:

1. validate the request
2. rate limit the client
3. check the user opted in to the channel
4. persist a PENDING notification log and commit it
5. publish a dispatch message referencing the log
6. return the log id

The log is committed before the message is published. A worker may pick
the message up immediately and must find the row.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from notification_service.core.exceptions import (
    InternalServerException,
    NotOptedInException,
    RateLimiterUnavailableError,
    RateLimitException,
    TransientDependencyError,
    ValidationException,
)
from notification_service.features.notifications.models import NotificationStatus
from notification_service.features.notifications.repository import (
    NotificationLogRepository,
    get_notification_log_repository,
)
from notification_service.features.notifications.schemas import NotificationAccepted, NotificationRequest
from notification_service.infra.logging import log_context
from notification_service.infra.metrics.tracking import track_ingested, track_rejected

if TYPE_CHECKING:
    from collections.abc import Mapping

    from notification_service.features.preferences.store import PreferenceStore
    from notification_service.infra.database import Database
    from notification_service.infra.messaging import NotificationPublisher
    from notification_service.infra.ratelimit import FixedWindowRateLimiter

logger = logging.getLogger(__name__)


class IngestionGateway:
    """Validates, gates and enqueues notification requests.

    Collaborators are injected at construction; the gateway holds no
    connections of its own.

    Args:
        database: Owner of the session factory for the log store.
        preference_store: Opt-in lookups.
        publisher: Publishes dispatch messages to the durable queue.
        rate_limiter: Per-client limiter; ``None`` disables rate limiting.
        timeout: Deadline in seconds for the preference lookup and for the
            publish, each applied separately.
        repository: Notification log repository.
    """

    def __init__(
        self,
        *,
        database: Database,
        preference_store: PreferenceStore,
        publisher: NotificationPublisher,
        rate_limiter: FixedWindowRateLimiter | None = None,
        timeout: float = 5.0,
        repository: NotificationLogRepository | None = None,
    ) -> None:
        self.database = database
        self.preference_store = preference_store
        self.publisher = publisher
        self.rate_limiter = rate_limiter
        self.timeout = timeout
        self.repository = repository or get_notification_log_repository()

    async def submit(
        self,
        request: NotificationRequest | Mapping[str, Any],
        client_key: str,
    ) -> NotificationAccepted:
        """Accept a notification for asynchronous delivery.

        Raises:
            ValidationException: Required fields missing or malformed.
            RateLimitException: The client exceeded its window.
            NotOptedInException: No enabled preference for the channel.
            InternalServerException: Limiter store, preference store,
                database or queue failed or timed out.
        """
        request = self._validate(request)
        channel = request.channel.value

        with log_context(user_id=request.user_id, channel=channel):
            await self._enforce_rate_limit(client_key)
            await self._require_opt_in(request.user_id, channel)

            log_id = await self._persist(request)
            with log_context(log_id=log_id):
                await self._publish(log_id)
                track_ingested(channel)
                logger.info("Notification accepted")

        return NotificationAccepted(log_id=log_id)

    @staticmethod
    def _validate(request: NotificationRequest | Mapping[str, Any]) -> NotificationRequest:
        if isinstance(request, NotificationRequest):
            return request
        try:
            return NotificationRequest.model_validate(request)
        except ValidationError as e:
            track_rejected("validation")
            errors = e.errors(include_url=False, include_context=False, include_input=False)
            raise ValidationException(
                detail="Invalid notification request",
                extra={"errors": errors},
            ) from e

    async def _enforce_rate_limit(self, client_key: str) -> None:
        if self.rate_limiter is None:
            return
        try:
            decision = await self.rate_limiter.check(client_key)
        except RateLimiterUnavailableError as e:
            track_rejected("rate_limiter_unavailable")
            raise InternalServerException(extra={"dependency": "rate_limiter"}) from e

        if not decision.allowed:
            track_rejected("rate_limited")
            raise RateLimitException(
                detail=f"Rate limit of {decision.limit} requests exceeded; retry in {decision.retry_after}s",
                extra={
                    "limit": decision.limit,
                    "remaining": decision.remaining,
                    "retry_after": decision.retry_after,
                },
            )

    async def _require_opt_in(self, user_id: str, channel: str) -> None:
        try:
            async with asyncio.timeout(self.timeout):
                opted_in = await self.preference_store.is_opted_in(user_id, channel)
        except TimeoutError as e:
            track_rejected("preference_timeout")
            logger.error("Preference lookup timed out", extra={"timeout": self.timeout})
            raise InternalServerException(extra={"dependency": "preference_store"}) from e
        except TransientDependencyError as e:
            track_rejected("preference_unavailable")
            logger.error("Preference lookup failed", extra={"error": e.reason})
            raise InternalServerException(extra={"dependency": "preference_store"}) from e

        if not opted_in:
            track_rejected("not_opted_in")
            logger.info("Rejected: user not opted in")
            raise NotOptedInException(user_id=user_id, channel=channel)

    async def _persist(self, request: NotificationRequest) -> int:
        try:
            async with self.database.session() as session:
                log = await self.repository.create_pending(
                    session,
                    user_id=request.user_id,
                    channel=request.channel.value,
                    message=request.message,
                    recipient=request.recipient,
                )
                await session.commit()
        except (SQLAlchemyError, OSError) as e:
            track_rejected("persistence_failed")
            logger.exception("Failed to persist notification log")
            raise InternalServerException(extra={"dependency": "database"}) from e
        return log.id

    async def _publish(self, log_id: int) -> None:
        try:
            async with asyncio.timeout(self.timeout):
                await self.publisher.publish(log_id)
        except Exception as e:
            track_rejected("publish_failed")
            logger.exception("Failed to publish dispatch message")
            await self._mark_failed(log_id, f"publish failed: {type(e).__name__}: {e}")
            raise InternalServerException(extra={"dependency": "queue"}) from e

    async def _mark_failed(self, log_id: int, reason: str) -> None:
        """Best-effort FAILED write after a publish failure."""
        try:
            async with self.database.session() as session:
                await self.repository.transition_status(
                    session,
                    log_id,
                    NotificationStatus.FAILED,
                    error=reason,
                )
                await session.commit()
        except (SQLAlchemyError, OSError):
            logger.exception("Could not mark notification log as FAILED after publish failure")
