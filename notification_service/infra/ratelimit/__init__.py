"""Redis-backed fixed-window rate limiting for the ingestion endpoint."""

from __future__ import annotations

from notification_service.infra.ratelimit.limiter import FixedWindowRateLimiter, RateLimitDecision

__all__ = ["FixedWindowRateLimiter", "RateLimitDecision"]
