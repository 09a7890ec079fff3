"""Fixed-count, fixed-delay retry policy for status writes."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryExhaustedError(Exception):
    """Every attempt of a retried operation failed."""

    def __init__(self, attempts: int, last_error: BaseException):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Gave up after {attempts} attempts: {last_error}")


@dataclass(frozen=True)
class RetryPolicy:
    """Retry an async operation a fixed number of times with a fixed pause.

    The pause only happens between attempts; there is no backoff growth or jitter.
    """

    max_attempts: int = 3
    delay: float = 0.1

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.delay < 0:
            raise ValueError("delay must not be negative")

    async def call(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run operation until it succeeds or attempts run out.

        Args:
            operation: Zero-argument callable returning a fresh awaitable per attempt

        Returns:
            The operation's result from the first successful attempt

        Raises:
            RetryExhaustedError: If all attempts raised.
        """
        last_error: Exception | None = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                return await operation()
            except Exception as e:
                last_error = e
                logger.debug(f"Attempt {attempt}/{self.max_attempts} failed: {e}")

            if attempt < self.max_attempts and self.delay > 0:
                await asyncio.sleep(self.delay)

        assert last_error is not None
        raise RetryExhaustedError(self.max_attempts, last_error) from last_error
