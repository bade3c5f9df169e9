"""Logging configuration via logging.config.dictConfig."""

from __future__ import annotations

import logging
import logging.config
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from notification_service.core.settings.logs import LoggingSettings

logger = logging.getLogger(__name__)

_LOGGING_INITIALIZED = False

_TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(
    log_settings: LoggingSettings | None = None,
    *,
    force: bool = False,
    **configure_kwargs: Any,
) -> None:
    """Ensure logging is configured once across entrypoints.

    Args:
        log_settings: Optional logging settings instance. If omitted, settings
            are loaded via get_logging_settings().
        force: Reconfigure logging even if it was already initialized.
        **configure_kwargs: Explicit overrides for configure_logging().
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    settings_obj = log_settings
    if settings_obj is None:
        from notification_service.core.settings import get_logging_settings

        settings_obj = get_logging_settings()

    log_config = {**settings_obj.to_logging_kwargs(), **configure_kwargs}
    configure_logging(**log_config)
    _LOGGING_INITIALIZED = True


def configure_logging(
    log_level: str = "INFO",
    json_logs: bool = True,
    include_context: bool = True,
    capture_warnings: bool = True,
    service_name: str = "notification-service",
    library_levels: dict[str, str] | None = None,
) -> None:
    """Configure the root logger.

    All handlers are attached to the root logger; application loggers
    propagate up. Uvicorn's loggers are routed through the same handler so
    API and worker output share one format.

    Args:
        log_level: Root logger level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_logs: Emit JSON Lines instead of plain text.
        include_context: Attach ContextInjectingFilter to the handler.
        capture_warnings: Forward Python warnings to logging.
        service_name: Static ``service`` field added to JSON records.
        library_levels: Per-logger level overrides.
    """
    logging.captureWarnings(capture_warnings)

    formatters: dict[str, Any] = {
        "json": {
            "()": "notification_service.infra.logging.formatters.JSONFormatter",
            "static": {"service": service_name},
        },
        "text": {"format": _TEXT_FORMAT},
    }
    filters: dict[str, Any] = {}
    handler_filters: list[str] = []
    if include_context:
        filters["context"] = {"()": "notification_service.infra.logging.context.ContextInjectingFilter"}
        handler_filters.append("context")

    loggers: dict[str, Any] = {
        name: {"level": level.upper()} for name, level in (library_levels or {}).items()
    }
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        loggers.setdefault(name, {"handlers": [], "propagate": True})

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": formatters,
            "filters": filters,
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stdout",
                    "formatter": "json" if json_logs else "text",
                    "filters": handler_filters,
                },
            },
            "loggers": loggers,
            "root": {"level": log_level.upper(), "handlers": ["console"]},
        },
    )
    logger.debug("Logging configured", extra={"json_logs": json_logs, "level": log_level})


def reset_logging_state() -> None:
    """Allow setup_logging() to run again (used by tests)."""
    global _LOGGING_INITIALIZED
    _LOGGING_INITIALIZED = False
