"""HTTP clients for external services."""

from __future__ import annotations

from notification_service.infra.external.base_client import BaseHTTPClient

__all__ = ["BaseHTTPClient"]
