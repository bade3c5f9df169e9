"""Metrics infrastructure."""

from __future__ import annotations

from notification_service.infra.metrics import tracking
from notification_service.infra.metrics.prometheus import REGISTRY

__all__ = ["REGISTRY", "tracking"]
