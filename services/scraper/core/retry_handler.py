"""
Retry Logic with Exponential Backoff and Jitter

Page fetches retry on transient failures (connection resets, timeouts, 5xx
responses). Bot-wall responses are not retried: hammering a blocked page
only extends the block.
"""

import logging
import random
import time
from typing import Any, Callable, Optional, Tuple, Type

from ..config import RetryConfig

logger = logging.getLogger(__name__)


class RetryExhausted(Exception):
    """Raised when all retry attempts are exhausted"""
    def __init__(self, last_exception: Optional[Exception], attempts: int, status_code: Optional[int] = None):
        self.last_exception = last_exception
        self.attempts = attempts
        self.status_code = status_code
        reason = last_exception if last_exception else f"HTTP {status_code}"
        super().__init__(f"Retry exhausted after {attempts} attempts: {reason}")


def calculate_backoff(
    attempt: int,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    jitter: str = "full"
) -> float:
    """
    Delay before retry number `attempt` (0-based).

    Jitter strategies:
    - "full": random between 0 and the exponential delay
    - "equal": half fixed, half random
    - "decorrelated": random between base and 3x the delay
    - "none": pure exponential
    """
    delay = min(base_delay * (exponential_base ** attempt), max_delay)

    if jitter == "full":
        return random.uniform(0, delay)
    if jitter == "equal":
        return delay / 2 + random.uniform(0, delay / 2)
    if jitter == "decorrelated":
        return min(max_delay, random.uniform(base_delay, delay * 3))
    return delay


class RetryHandler:
    """
    Runs a call until it succeeds, fails permanently, or attempts run out.

    `func` may return an object with a `status_code`; codes listed in
    RetryConfig.retryable_codes are retried like exceptions.
    """

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        retryable_exceptions: Tuple[Type[Exception], ...] = (ConnectionError, TimeoutError),
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config or RetryConfig()
        self.retryable_exceptions = retryable_exceptions
        self.sleep = sleep

    def get_delay(self, attempt: int) -> float:
        return calculate_backoff(
            attempt=attempt,
            base_delay=self.config.base_delay,
            max_delay=self.config.max_delay,
            jitter=self.config.jitter,
        )

    def execute(self, func: Callable, *args, **kwargs) -> Any:
        last_exception: Optional[Exception] = None
        last_status: Optional[int] = None

        for attempt in range(self.config.max_attempts):
            try:
                result = func(*args, **kwargs)
            except self.retryable_exceptions as e:
                last_exception, last_status = e, None
                reason = str(e)
            else:
                status = getattr(result, "status_code", None)
                if status not in self.config.retryable_codes:
                    return result
                last_exception, last_status = None, status
                reason = f"HTTP {status}"

            if attempt == self.config.max_attempts - 1:
                break

            delay = self.get_delay(attempt)
            logger.warning(
                f"Attempt {attempt + 1}/{self.config.max_attempts} failed: {reason}. "
                f"Retrying in {delay:.2f}s"
            )
            self.sleep(delay)

        raise RetryExhausted(last_exception, self.config.max_attempts, last_status)
