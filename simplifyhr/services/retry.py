"""
Fixed-count retry with linear backoff, built on tenacity.

Used around AI chat turns, AI screening and realtime token issuance:
attempt N failing waits N * base_delay seconds before attempt N + 1.
After the last attempt the caller gets RetryExhaustedError.
"""

import logging
import time
from typing import Callable, Optional, Tuple, Type, TypeVar

from tenacity import RetryError, Retrying, retry_if_exception_type, stop_after_attempt, wait_incrementing

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryExhaustedError(Exception):
    """All attempts failed. ``last_error`` holds the final exception."""

    def __init__(self, attempts: int, last_error: Exception):
        super().__init__(f"Failed after {attempts} attempts: {last_error}")
        self.attempts = attempts
        self.last_error = last_error


def call_with_retries(
    func: Callable[[], T],
    attempts: int = 3,
    base_delay: float = 1.0,
    retry_on: Tuple[Type[Exception], ...] = (Exception,),
    sleep: Callable[[float], None] = time.sleep,
    label: Optional[str] = None
) -> T:
    """
    Call ``func`` up to ``attempts`` times.

    Args:
        func: Zero-argument callable doing one attempt
        attempts: Total number of attempts (not retries)
        base_delay: Delay unit; the wait after failed attempt N is N * base_delay
        retry_on: Exception types that trigger another attempt; others propagate at once
        sleep: Injected for tests
        label: Name used in log lines

    Returns:
        Whatever ``func`` returns on the first successful attempt

    Raises:
        RetryExhaustedError after the final failed attempt
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    name = label or getattr(func, "__name__", "call")

    def log_retry(retry_state):
        logger.warning(
            "%s failed (attempt %d/%d): %s; retrying in %.1fs",
            name,
            retry_state.attempt_number,
            attempts,
            retry_state.outcome.exception(),
            retry_state.next_action.sleep
        )

    retryer = Retrying(
        stop=stop_after_attempt(attempts),
        wait=wait_incrementing(start=base_delay, increment=base_delay),
        retry=retry_if_exception_type(retry_on),
        sleep=sleep,
        before_sleep=log_retry,
        reraise=False
    )

    try:
        return retryer(func)
    except RetryError as e:
        last_error = e.last_attempt.exception()
        logger.error("%s giving up after %d attempts: %s", name, attempts, last_error)
        raise RetryExhaustedError(attempts, last_error) from last_error
