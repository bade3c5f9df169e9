"""Logging infrastructure.

Structured logging on top of the standard library:
- JSONL format for log aggregation
- Automatic context injection (request_id in the API; log_id, user_id,
  channel in dispatch tasks)

Basic usage:
    from notification_service.infra.logging import set_log_context
    import logging

    logger = logging.getLogger(__name__)

    set_log_context(request_id="abc-123")
    logger.info("Processing request")  # Automatically includes request_id
"""

from notification_service.infra.logging.config import (
    configure_logging,
    reset_logging_state,
    setup_logging,
)
from notification_service.infra.logging.context import (
    ContextInjectingFilter,
    clear_log_context,
    get_log_context,
    log_context,
    set_log_context,
)
from notification_service.infra.logging.formatters import JSONFormatter

__all__ = [
    "ContextInjectingFilter",
    "JSONFormatter",
    "clear_log_context",
    "configure_logging",
    "get_log_context",
    "log_context",
    "reset_logging_state",
    "set_log_context",
    "setup_logging",
]
