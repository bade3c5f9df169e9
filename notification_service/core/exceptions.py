"""Exception hierarchy for the notification service.

Two families live here:

* ``AppException`` subclasses are surfaced to HTTP callers as RFC 7807
  problem details by the handlers in ``app.exception_handlers``.
* ``PipelineError`` subclasses classify failures inside the ingestion and
  dispatch pipeline. The dispatch worker absorbs them into a message
  acknowledgement decision and a terminal status; they never reach a caller.
"""

from __future__ import annotations

from typing import Any


class AppException(Exception):
    """Base application exception.

    Follows RFC 7807 Problem Details for HTTP APIs.

    Attributes:
        status_code: HTTP status code for the error.
        detail: Human-readable error message.
        type: Error type identifier (used in RFC 7807 problem details).
        title: Short, human-readable summary of the problem type.
        instance: URI reference that identifies the specific occurrence of the problem.
        extra: Additional context-specific information about the error.
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        type: str = "about:blank",
        title: str | None = None,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        self.detail = detail
        self.type = type
        self.title = title or self._default_title(status_code)
        self.instance = instance
        self.extra = extra or {}
        super().__init__(detail)

    @staticmethod
    def _default_title(status_code: int) -> str:
        titles = {
            400: "Bad Request",
            404: "Not Found",
            409: "Conflict",
            422: "Unprocessable Entity",
            429: "Too Many Requests",
            500: "Internal Server Error",
            503: "Service Unavailable",
        }
        return titles.get(status_code, "Error")


class ValidationException(AppException):
    """Malformed or missing request fields. User-caused, not retried.

    Example:
        raise ValidationException(
            detail="recipient must be an email address for the email channel",
            extra={"field": "recipient"},
        )
    """

    def __init__(
        self,
        detail: str,
        type: str = "validation-error",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=400,
            detail=detail,
            type=type,
            title="Validation Error",
            instance=instance,
            extra=extra,
        )


class NotOptedInException(AppException):
    """The user has no enabled preference for the requested channel.

    Doubles as "unknown user": no preference record means no known user.
    """

    def __init__(
        self,
        user_id: str,
        channel: str,
        instance: str | None = None,
    ) -> None:
        super().__init__(
            status_code=400,
            detail=f"User {user_id} has not opted in to {channel} notifications",
            type="not-opted-in",
            title="Not Opted In",
            instance=instance,
            extra={"user_id": user_id, "channel": channel},
        )


class RateLimitException(AppException):
    """Client exceeded the ingestion rate limit. Retry after the window.

    Example:
        raise RateLimitException(
            detail="Too many requests",
            extra={"retry_after": 60, "limit": 20},
        )
    """

    def __init__(
        self,
        detail: str = "Too Many Requests",
        type: str = "rate-limit-exceeded",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=429,
            detail=detail,
            type=type,
            title="Too Many Requests",
            instance=instance,
            extra=extra,
        )


class NotFoundException(AppException):
    """Requested resource does not exist."""

    def __init__(
        self,
        detail: str,
        type: str = "not-found",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=404,
            detail=detail,
            type=type,
            title="Not Found",
            instance=instance,
            extra=extra,
        )


class InternalServerException(AppException):
    """Infrastructure failure on a synchronous path (database, queue, limiter store)."""

    def __init__(
        self,
        detail: str = "Failed to process request",
        type: str = "internal-error",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=500,
            detail=detail,
            type=type,
            title="Internal Server Error",
            instance=instance,
            extra=extra,
        )


# ============================================================================
# Pipeline errors
# ============================================================================


class PipelineError(Exception):
    """Base class for failures classified by the ingestion/dispatch pipeline."""


class TransientDependencyError(PipelineError):
    """An infrastructure call failed; eligible for message-level retry via requeue."""

    def __init__(self, dependency: str, reason: str) -> None:
        self.dependency = dependency
        self.reason = reason
        super().__init__(f"{dependency} unavailable: {reason}")


class MalformedMessageError(PipelineError):
    """A queue payload could not be decoded. Discarded, never retried."""


class UnsupportedChannelError(PipelineError):
    """A notification names a channel with no registered sender."""

    def __init__(self, channel: str) -> None:
        self.channel = channel
        super().__init__(f"Unsupported notification channel: {channel!r}")


class SendError(PipelineError):
    """A channel sender failed to hand the notification to its provider.

    Recorded as a permanent delivery failure (FAILED); the message is still
    acknowledged.
    """

    def __init__(self, channel: str, reason: str, *, provider_code: str | None = None) -> None:
        self.channel = channel
        self.reason = reason
        self.provider_code = provider_code
        super().__init__(f"{channel} send failed: {reason}")


class RateLimiterUnavailableError(PipelineError):
    """The rate limiter's counting store is unreachable. Requests fail closed."""
