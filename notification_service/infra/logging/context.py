"""Context management for structured logging.

Provides automatic context injection into log records using contextvars, so
request IDs in the API and log/user identifiers in dispatch tasks appear in
every message without explicit passing. Each asyncio task gets its own copy
of the context, which keeps concurrent dispatches from bleeding into each
other's records.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterator

_log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})


def set_log_context(**kwargs: Any) -> None:
    """Add key-value pairs to the logging context of the current task.

    Example:
        set_log_context(request_id="abc-123")
        logger.info("Processing request")  # Includes request_id
    """
    current = _log_context.get().copy()
    current.update(kwargs)
    _log_context.set(current)


def get_log_context() -> dict[str, Any]:
    """Get a copy of the current logging context."""
    return _log_context.get().copy()


def clear_log_context() -> None:
    """Clear all logging context for the current task."""
    _log_context.set({})


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Temporarily extend the logging context.

    Example:
        with log_context(log_id=42, user_id="u-1"):
            logger.info("Dispatching")
    """
    token = _log_context.set({**_log_context.get(), **kwargs})
    try:
        yield
    finally:
        _log_context.reset(token)


class ContextInjectingFilter(logging.Filter):
    """Inject the current logging context into every record.

    Explicit ``extra=`` values win over context values with the same key.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _log_context.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True
