"""Redis-backed fixed-window rate limiter.

One counter per client key. The first request in a window creates the key
and sets its expiry; later requests only increment it. Both steps run in a
single Lua script, so concurrent callers for the same key cannot leave a
counter without a TTL.

Unlike a best-effort limiter, a failing Redis is a hard failure here: the
limiter raises ``RateLimiterUnavailableError`` and the caller rejects the
request (fail-closed).
"""

from __future__ import annotations

from dataclasses import dataclass
import hashlib
import logging
from typing import TYPE_CHECKING

from redis.exceptions import RedisError

from notification_service.core.exceptions import RateLimiterUnavailableError
from notification_service.infra.metrics.tracking import track_rate_limit_check

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = logging.getLogger(__name__)

# KEYS[1] = counter key, ARGV[1] = window in seconds
# Returns {count, ttl_seconds}
_INCR_WITH_EXPIRY = """
local count = redis.call('INCR', KEYS[1])
if count == 1 then
    redis.call('EXPIRE', KEYS[1], ARGV[1])
end
local ttl = redis.call('TTL', KEYS[1])
if ttl < 0 then
    redis.call('EXPIRE', KEYS[1], ARGV[1])
    ttl = tonumber(ARGV[1])
end
return {count, ttl}
"""


@dataclass(frozen=True, slots=True)
class RateLimitDecision:
    """Outcome of a single rate limit check.

    Attributes:
        allowed: Whether the request may proceed.
        limit: Requests allowed per window.
        remaining: Requests left in the current window.
        retry_after: Seconds until the window resets (0 when allowed).
    """

    allowed: bool
    limit: int
    remaining: int
    retry_after: int


class FixedWindowRateLimiter:
    """Fixed-window request counter keyed by client identity.

    Example:
        limiter = FixedWindowRateLimiter(redis, limit=20, window=60)
        if not await limiter.allow("203.0.113.7"):
            raise RateLimitException()
    """

    def __init__(
        self,
        redis: Redis,
        *,
        limit: int = 20,
        window: int = 60,
        key_prefix: str = "ratelimit",
    ) -> None:
        if limit < 1 or window < 1:
            msg = "limit and window must be positive"
            raise ValueError(msg)
        self.redis = redis
        self.limit = limit
        self.window = window
        self.key_prefix = key_prefix

    def _make_key(self, client_key: str) -> str:
        # Hash long identifiers to keep key size reasonable
        if len(client_key) > 64:
            client_key = hashlib.sha256(client_key.encode()).hexdigest()[:32]
        return f"{self.key_prefix}:{client_key}"

    async def check(self, client_key: str) -> RateLimitDecision:
        """Count this request and decide whether it is within the limit.

        Raises:
            RateLimiterUnavailableError: If Redis cannot be reached.
        """
        key = self._make_key(client_key)
        try:
            count, ttl = await self.redis.eval(_INCR_WITH_EXPIRY, 1, key, self.window)
        except (RedisError, OSError) as exc:
            logger.error(
                "Rate limit store unavailable, rejecting request",
                extra={"client_key": client_key, "error": str(exc)},
            )
            raise RateLimiterUnavailableError(str(exc)) from exc

        count = int(count)
        allowed = count <= self.limit
        decision = RateLimitDecision(
            allowed=allowed,
            limit=self.limit,
            remaining=max(self.limit - count, 0),
            retry_after=0 if allowed else max(int(ttl), 1),
        )
        track_rate_limit_check(allowed)
        if not allowed:
            logger.warning(
                "Rate limit exceeded",
                extra={
                    "client_key": client_key,
                    "count": count,
                    "limit": self.limit,
                    "window": self.window,
                },
            )
        return decision

    async def allow(self, client_key: str) -> bool:
        """Return True if the request is within the limit."""
        return (await self.check(client_key)).allowed

    async def reset(self, client_key: str) -> None:
        """Drop the counter for a client key."""
        try:
            await self.redis.delete(self._make_key(client_key))
        except (RedisError, OSError) as exc:
            raise RateLimiterUnavailableError(str(exc)) from exc
        logger.info("Rate limit reset", extra={"client_key": client_key})
