"""Per-message dispatch: decode, look up, re-check opt-in, send, record.

``DispatchProcessor.process`` handles exactly one delivery and always ends
it with an acknowledgement decision:

==============================  ============================
Situation                       Queue action / log status
==============================  ============================
undecodable payload             nack, discard
log id not found                nack, discard
log already terminal            ack, no send
channel has no sender           ack, UNSUPPORTED
preference store unreachable    nack, requeue (log stays PENDING)
no enabled preference           ack, SKIPPED
sender succeeded                ack, SENT
sender failed (after retries)   ack, FAILED
==============================  ============================

Send failures are never requeued: a second broker delivery could reach the
user twice.
"""

from __future__ import annotations

from enum import StrEnum
import logging
import time
from typing import TYPE_CHECKING, Protocol

from sqlalchemy.exc import SQLAlchemyError

from notification_service.core.exceptions import (
    MalformedMessageError,
    SendError,
    TransientDependencyError,
    UnsupportedChannelError,
)
from notification_service.features.notifications.models import NotificationStatus
from notification_service.features.notifications.repository import (
    NotificationLogRepository,
    get_notification_log_repository,
)
from notification_service.features.notifications.schemas import DispatchMessage
from notification_service.infra.logging import log_context
from notification_service.infra.metrics.tracking import (
    observe_send_duration,
    track_dispatch_outcome,
    track_send_attempt,
)
from notification_service.utils.retry import RetryError, retry

if TYPE_CHECKING:
    from notification_service.features.notifications.channels import ChannelRegistry, ChannelSender
    from notification_service.features.notifications.models import NotificationLog
    from notification_service.features.preferences.store import PreferenceStore
    from notification_service.infra.database import Database

logger = logging.getLogger(__name__)


class Delivery(Protocol):
    """One consumed queue message and its acknowledgement handle."""

    body: bytes

    async def ack(self) -> None: ...

    async def nack(self, requeue: bool = True) -> None: ...


class DispatchOutcome(StrEnum):
    DISCARDED_MALFORMED = "discarded_malformed"
    DISCARDED_NOT_FOUND = "discarded_not_found"
    REQUEUED = "requeued"
    DUPLICATE = "duplicate"
    SKIPPED = "skipped"
    SENT = "sent"
    FAILED = "failed"
    UNSUPPORTED = "unsupported"


_OUTCOME_BY_STATUS = {
    NotificationStatus.SENT: DispatchOutcome.SENT,
    NotificationStatus.FAILED: DispatchOutcome.FAILED,
    NotificationStatus.SKIPPED: DispatchOutcome.SKIPPED,
    NotificationStatus.UNSUPPORTED: DispatchOutcome.UNSUPPORTED,
}


class DispatchProcessor:
    """Routes one dispatch message to its channel sender and records the outcome.

    Args:
        database: Owner of the session factory for the log store.
        preference_store: Opt-in lookups.
        channels: Sender per channel.
        send_max_attempts: Attempts per send before recording FAILED;
            1 means no retry.
        send_retry_delay: Initial backoff between send attempts, in seconds.
        repository: Notification log repository.
    """

    def __init__(
        self,
        *,
        database: Database,
        preference_store: PreferenceStore,
        channels: ChannelRegistry,
        send_max_attempts: int = 1,
        send_retry_delay: float = 1.0,
        repository: NotificationLogRepository | None = None,
    ) -> None:
        self.database = database
        self.preference_store = preference_store
        self.channels = channels
        self.send_max_attempts = send_max_attempts
        self.send_retry_delay = send_retry_delay
        self.repository = repository or get_notification_log_repository()

    async def process(self, delivery: Delivery) -> DispatchOutcome:
        """Process one delivery and ack or nack it.

        Infrastructure errors other than the preference lookup propagate;
        the worker pool turns them into a requeue.
        """
        try:
            message = DispatchMessage.decode(delivery.body)
        except MalformedMessageError as e:
            logger.warning("Discarding malformed dispatch message", extra={"error": str(e)})
            await delivery.nack(requeue=False)
            return _finish(DispatchOutcome.DISCARDED_MALFORMED)

        with log_context(log_id=message.notification_log_id):
            return await self._dispatch(message.notification_log_id, delivery)

    async def _dispatch(self, log_id: int, delivery: Delivery) -> DispatchOutcome:
        async with self.database.session() as session:
            log = await self.repository.get(session, log_id)

        if log is None:
            logger.warning("Notification log not found, discarding message")
            await delivery.nack(requeue=False)
            return _finish(DispatchOutcome.DISCARDED_NOT_FOUND)

        if log.is_terminal:
            logger.info("Notification already %s, acknowledging redelivery", log.status)
            await delivery.ack()
            return _finish(DispatchOutcome.DUPLICATE)

        with log_context(user_id=log.user_id, channel=log.channel):
            try:
                sender = self.channels.get(log.channel)
            except UnsupportedChannelError as e:
                logger.warning("Unsupported notification channel")
                return await self._complete(log_id, delivery, NotificationStatus.UNSUPPORTED, error=str(e))

            try:
                eligible = await self.preference_store.is_opted_in(log.user_id, log.channel)
            except TransientDependencyError as e:
                logger.warning("Preference lookup failed, requeueing", extra={"error": e.reason})
                await delivery.nack(requeue=True)
                return _finish(DispatchOutcome.REQUEUED)

            if not eligible:
                logger.info("User not opted in to channel, skipping")
                return await self._complete(log_id, delivery, NotificationStatus.SKIPPED)

            status, error, attempts = await self._send(sender, log)
            return await self._complete(log_id, delivery, status, error=error, attempts=attempts)

    async def _send(
        self,
        sender: ChannelSender,
        log: NotificationLog,
    ) -> tuple[NotificationStatus, str | None, int]:
        channel = log.channel
        attempts = 0

        async def attempt() -> None:
            nonlocal attempts
            attempts += 1
            track_send_attempt(channel)
            started = time.perf_counter()
            try:
                await sender.send(log.recipient, log.message)
            finally:
                observe_send_duration(channel, time.perf_counter() - started)

        send = retry(
            max_attempts=self.send_max_attempts,
            initial_delay=self.send_retry_delay,
            exceptions=(SendError,),
        )(attempt)

        try:
            await send()
        except RetryError as e:
            logger.warning(
                "Send failed",
                extra={"attempts": attempts, "error": str(e.last_exception)},
            )
            return NotificationStatus.FAILED, str(e.last_exception), attempts

        logger.info("Notification sent", extra={"attempts": attempts})
        return NotificationStatus.SENT, None, attempts

    async def _complete(
        self,
        log_id: int,
        delivery: Delivery,
        status: NotificationStatus,
        *,
        error: str | None = None,
        attempts: int | None = None,
    ) -> DispatchOutcome:
        """Write the terminal status, then acknowledge.

        The message is acknowledged even when the write fails or loses a race
        with another worker: a requeue after a send could deliver twice.
        """
        try:
            async with self.database.session() as session:
                changed = await self.repository.transition_status(
                    session,
                    log_id,
                    status,
                    error=error,
                    attempts=attempts,
                )
                await session.commit()
        except (SQLAlchemyError, OSError):
            logger.exception("Failed to record terminal status %s", status.value)
        else:
            if not changed:
                logger.warning("Status %s not recorded, log already left PENDING", status.value)

        await delivery.ack()
        return _finish(_OUTCOME_BY_STATUS[status])


def _finish(outcome: DispatchOutcome) -> DispatchOutcome:
    track_dispatch_outcome(outcome.value)
    return outcome
