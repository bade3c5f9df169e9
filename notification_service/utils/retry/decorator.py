"""Async retry decorator with exponential backoff and jitter."""

from __future__ import annotations

import asyncio
from functools import wraps
import logging
import random
from typing import TYPE_CHECKING, ParamSpec, TypeVar

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


class RetryError(Exception):
    """Raised after exhausting retry attempts.

    Attributes:
        last_exception: The exception raised by the final attempt.
        attempts: Number of attempts made.
    """

    def __init__(self, last_exception: Exception, attempts: int) -> None:
        self.last_exception = last_exception
        self.attempts = attempts
        super().__init__(f"Failed after {attempts} attempts. Last error: {last_exception}")


class RetryStrategy:
    """Which exceptions to retry and how long to wait between attempts."""

    def __init__(
        self,
        initial_delay: float = 1.0,
        max_delay: float = 60.0,
        exponential_base: float = 2.0,
        jitter: bool = True,
        exceptions: tuple[type[Exception], ...] = (Exception,),
    ) -> None:
        self.initial_delay = initial_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.jitter = jitter
        self.exceptions = exceptions

    def should_retry(self, exception: Exception) -> bool:
        return isinstance(exception, self.exceptions)

    def calculate_delay(self, attempt: int) -> float:
        delay = min(self.initial_delay * (self.exponential_base**attempt), self.max_delay)
        if self.jitter:
            delay *= random.uniform(0.5, 1.5)  # noqa: S311
        return delay


def retry(
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    exceptions: tuple[type[Exception], ...] = (Exception,),
    on_retry: Callable[[Exception, int], None] | None = None,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Retry an async callable on the given exceptions.

    Non-matching exceptions propagate immediately. When every attempt fails
    with a matching exception, ``RetryError`` is raised from the last one.
    ``max_attempts=1`` means a single attempt and no retry.

    Example:
        send = retry(max_attempts=3, exceptions=(SendError,))(sender.send)
        await send(recipient, body)
    """
    if max_attempts < 1:
        msg = "max_attempts must be at least 1"
        raise ValueError(msg)

    strategy = RetryStrategy(
        initial_delay=initial_delay,
        max_delay=max_delay,
        exponential_base=exponential_base,
        jitter=jitter,
        exceptions=exceptions,
    )

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        name = getattr(func, "__qualname__", repr(func))

        @wraps(func)
        async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            for attempt in range(max_attempts):
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    if not strategy.should_retry(e):
                        raise
                    if attempt >= max_attempts - 1:
                        if max_attempts > 1:
                            logger.error(
                                f"All retry attempts exhausted for {name}",
                                extra={"function": name, "attempts": attempt + 1, "last_exception": str(e)},
                            )
                        raise RetryError(e, attempt + 1) from e

                    delay = strategy.calculate_delay(attempt)
                    logger.warning(
                        f"Retrying {name} after {delay:.2f}s (attempt {attempt + 1}/{max_attempts})",
                        extra={"function": name, "attempt": attempt + 1, "delay": delay, "exception": str(e)},
                    )
                    if on_retry:
                        on_retry(e, attempt + 1)
                    await asyncio.sleep(delay)

            msg = "Retry logic error: exhausted all attempts"
            raise RuntimeError(msg)

        return async_wrapper

    return decorator
