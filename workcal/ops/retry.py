"""
Retry with Exponential Backoff

Wraps one fallible operation with bounded retries. The wait between attempts
doubles each time: initial_delay_ms, 2x, 4x, ... The final failure is never
swallowed; it surfaces as RetryExhaustedError carrying the last error.

Waiting is a blocking sleep on the calling thread. The sleep function is
injected so tests can record delays instead of waiting.

Usage:
    from workcal.ops.retry import RetryExecutor

    retry = RetryExecutor()
    event = retry.run(lambda: calendar.create_event(...), max_retries=3)
"""

import time
from collections.abc import Callable
from typing import TypeVar

from workcal.errors import RetryExhaustedError
from workcal.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class RetryExecutor:
    """Runs an operation until it succeeds or max_retries attempts are spent.

    Args:
        sleep: Called with the wait in seconds between attempts.
    """

    def __init__(self, sleep: Callable[[float], None] = time.sleep):
        self.sleep = sleep

    @staticmethod
    def backoff_ms(attempt: int, initial_delay_ms: int) -> int:
        """Wait after the given (1-based) failed attempt."""
        return initial_delay_ms * 2 ** (attempt - 1)

    def run(
        self,
        operation: Callable[[], T],
        max_retries: int = 3,
        initial_delay_ms: int = 1000,
    ) -> T:
        """Invoke operation, retrying on any exception.

        Args:
            operation: Zero-argument callable.
            max_retries: Total number of attempts (>= 1).
            initial_delay_ms: Wait after the first failure.

        Returns:
            The operation's return value from the first successful attempt.

        Raises:
            RetryExhaustedError: All attempts failed.
            ValueError: max_retries < 1.
        """
        if max_retries < 1:
            raise ValueError(f"max_retries must be at least 1, got {max_retries}")

        last_error: Exception | None = None
        for attempt in range(1, max_retries + 1):
            try:
                return operation()
            except Exception as e:
                last_error = e
                if attempt >= max_retries:
                    break
                delay_ms = self.backoff_ms(attempt, initial_delay_ms)
                logger.warning(
                    f"Attempt {attempt}/{max_retries} failed: {e}. Retrying in {delay_ms}ms"
                )
                self.sleep(delay_ms / 1000)

        logger.error(f"All {max_retries} attempts failed: {last_error}")
        raise RetryExhaustedError(max_retries, last_error)
