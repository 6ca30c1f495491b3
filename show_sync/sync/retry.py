"""
Bounded exponential-backoff retry.

RetryPolicy runs an operation up to N times, sleeping between failed
attempts with a delay that doubles up to a cap. It is pure orchestration:
any exception raised by the operation counts as a failed attempt, any
normal return (including an empty value) is a success.

Operations that know a failure is permanent should not raise. For example
the media uploader returns an empty key for an unsupported URL scheme, and
the policy hands that back immediately without sleeping.

Usage:
    policy = RetryPolicy(attempts=8, initial_delay=0.2, max_delay=10.0)

    key = policy.run(lambda: uploader.upload(name, url), description="image upload")
    policy.run(lambda: client.update_content(show_id, body), description="update")
"""

import time
from dataclasses import dataclass
from typing import Callable, TypeVar

from show_sync.core.exceptions import RetryExhaustedError
from show_sync.core.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry configuration plus the loop that applies it.

    Attributes:
        attempts: Maximum number of attempts (>= 1).
        initial_delay: Delay after the first failure, in seconds.
        max_delay: Upper bound for any single delay, in seconds.
        sleep: Sleep function, replaced in tests.
    """
    attempts: int
    initial_delay: float
    max_delay: float
    sleep: Callable[[float], None] = time.sleep

    def __post_init__(self) -> None:
        if self.attempts < 1:
            raise ValueError("attempts must be at least 1")
        if self.initial_delay < 0 or self.max_delay < 0:
            raise ValueError("delays must not be negative")

    def delays(self) -> list[float]:
        """
        Delays slept between attempts when every attempt fails.

        Example:
            RetryPolicy(4, 0.1, 0.8).delays()  # [0.1, 0.2, 0.4]
        """
        result = []
        delay = min(self.initial_delay, self.max_delay)
        for _ in range(self.attempts - 1):
            result.append(delay)
            delay = min(delay * 2, self.max_delay)
        return result

    def run(self, operation: Callable[[], T], description: str = "") -> T:
        """
        Run operation until it succeeds or attempts are used up.

        Args:
            operation: Zero-argument callable. Raising means failure.
            description: Short label used in log messages.

        Returns:
            The value returned by the first successful attempt.

        Raises:
            RetryExhaustedError: If all attempts failed. Chained from the
                                 last error raised by the operation.
        """
        delay = min(self.initial_delay, self.max_delay)
        last_error: Exception | None = None

        for attempt in range(1, self.attempts + 1):
            try:
                return operation()
            except Exception as e:
                last_error = e
                logger.debug(
                    f"{description or 'Operation'}: attempt {attempt}/{self.attempts} failed: {e}"
                )

            if attempt < self.attempts:
                self.sleep(delay)
                delay = min(delay * 2, self.max_delay)

        assert last_error is not None
        raise RetryExhaustedError(self.attempts, last_error, description) from last_error
