"""Retry policy for resource API requests.

Provides configurable retry logic with exponential backoff. Only transient
failures are retried: connection errors and 429/5xx responses.
"""

import random
from dataclasses import dataclass, field

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


@dataclass
class RetryPolicy:
    """Configurable retry policy with exponential backoff."""
    max_retries: int = 3
    initial_delay: float = 0.5
    backoff_factor: float = 2.0
    max_delay: float = 10.0
    jitter: bool = True
    retry_on_status: frozenset = field(default=RETRYABLE_STATUS_CODES)

    def get_delay(self, attempt: int) -> float:
        """Calculate delay for a given retry attempt (0-indexed).

        Args:
            attempt: Current attempt number (0 = first retry).

        Returns:
            Delay in seconds before next retry.
        """
        delay = min(self.initial_delay * (self.backoff_factor ** attempt), self.max_delay)
        if self.jitter:
            delay += random.uniform(0, delay * 0.1)
        return delay

    def should_retry(self, attempt: int, status_code: int = 0) -> bool:
        """Whether another attempt is allowed after ``attempt`` failed.

        ``status_code`` 0 means the request never got a response.
        """
        if attempt >= self.max_retries:
            return False
        return status_code == 0 or status_code in self.retry_on_status


def default_retry_policy() -> RetryPolicy:
    """3 retries, 0.5s initial delay, 2x backoff, 10s max."""
    return RetryPolicy()


def no_retry_policy() -> RetryPolicy:
    """Create a no-retry policy (fail immediately)."""
    return RetryPolicy(max_retries=0)
