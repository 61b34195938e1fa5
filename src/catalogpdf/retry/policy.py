"""
Retry policy for calls to flaky external services (the rendering service).

Retries are always decided by the caller; the renderer itself never retries.
"""

import random
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Optional, Tuple, Type

from catalogpdf.exceptions import RenderError


@dataclass
class RetryPolicy:
    """
    Exponential backoff with optional jitter.

    Examples:
        >>> policy = RetryPolicy(max_attempts=3)
        >>> policy = RetryPolicy(
        ...     max_attempts=5,
        ...     initial_delay=2.0,
        ...     max_delay=60.0,
        ...     retryable_exceptions=(RenderError,),
        ... )
    """

    # Retries after the first call (total executions = max_attempts + 1)
    max_attempts: int = 2

    # Delay before the first retry (seconds)
    initial_delay: float = 1.0

    # Upper bound for any delay (seconds)
    max_delay: float = 30.0

    # delay = initial_delay * base^attempt
    exponential_base: float = 2.0

    # ±25% random jitter
    jitter: bool = True

    # Only retry these exception types (None = retry all exceptions)
    retryable_exceptions: Optional[Tuple[Type[Exception], ...]] = None

    # Optional (exception, attempt) -> bool, takes precedence over retryable_exceptions
    retry_condition: Optional[Callable[[Exception, int], bool]] = None

    def __post_init__(self):
        """Validate configuration."""
        if self.max_attempts < 0:
            raise ValueError("max_attempts must be >= 0")
        if self.initial_delay <= 0:
            raise ValueError("initial_delay must be > 0")
        if self.max_delay < self.initial_delay:
            raise ValueError("max_delay must be >= initial_delay")
        if self.exponential_base < 1.0:
            raise ValueError("exponential_base must be >= 1.0")

    @classmethod
    def from_config(cls, data: dict[str, Any] | None) -> "RetryPolicy":
        """Build a policy from the ``retry:`` config section."""
        data = data or {}
        return cls(
            max_attempts=int(data.get("max_attempts", 2)),
            initial_delay=float(data.get("initial_delay", 1.0)),
            max_delay=float(data.get("max_delay", 30.0)),
            jitter=bool(data.get("jitter", True)),
            retryable_exceptions=(RenderError,),
            retry_condition=_is_transient,
        )

    def should_retry(self, exception: Exception, attempt: int) -> bool:
        """
        Determine if we should retry after this exception.

        Args:
            exception: The exception that occurred
            attempt: Current attempt number (0-indexed)
        """
        if attempt >= self.max_attempts:
            return False
        if self.retry_condition is not None:
            return self.retry_condition(exception, attempt)
        if self.retryable_exceptions is not None:
            return isinstance(exception, self.retryable_exceptions)
        return True

    def get_delay(self, attempt: int) -> float:
        """delay = min(initial_delay * base^attempt * jitter, max_delay)"""
        delay = self.initial_delay * (self.exponential_base**attempt)
        if self.jitter:
            delay *= random.uniform(0.75, 1.25)
        return min(delay, self.max_delay)


def _is_transient(exception: Exception, attempt: int) -> bool:
    """Transport failures and 5xx/429 responses are worth another try; 4xx are not."""
    if not isinstance(exception, RenderError):
        return False
    return exception.status is None or exception.status >= 500 or exception.status == 429


DEFAULT_RENDER_RETRY_POLICY = RetryPolicy(
    max_attempts=2,
    initial_delay=1.0,
    max_delay=10.0,
    retryable_exceptions=(RenderError,),
    retry_condition=_is_transient,
)

NO_RETRY_POLICY = RetryPolicy(max_attempts=0)
