from __future__ import annotations

from notification_service.utils.retry.decorator import RetryError, RetryStrategy, retry

__all__ = ["RetryError", "RetryStrategy", "retry"]
