"""
Retry manager for executing calls with exponential backoff.
"""

import time
from collections.abc import Callable
from typing import Any, TypeVar

from catalogpdf.exceptions import RetryError
from catalogpdf.retry.policy import DEFAULT_RENDER_RETRY_POLICY, RetryPolicy
from catalogpdf.utils.logging import get_logger

logger = get_logger("catalogpdf.retry.manager")

T = TypeVar("T")


class RetryManager:
    """
    Wraps a sync callable with retry logic based on a RetryPolicy.

    Examples:
        >>> manager = RetryManager()
        >>> pdf = manager.execute_sync(renderer.render_fixed_page, html, name="A4 sheet")
    """

    def __init__(self, sleep: Callable[[float], Any] = time.sleep):
        self._sleep = sleep

    def execute_sync(
        self,
        func: Callable[..., T],
        *args,
        policy: RetryPolicy | None = None,
        name: str | None = None,
        **kwargs,
    ) -> T:
        """
        Execute ``func`` until it succeeds or the policy gives up.

        Raises:
            RetryError: every allowed attempt failed (the last error is chained)
            Exception: the first non-retryable error, unchanged
        """
        policy = policy or DEFAULT_RENDER_RETRY_POLICY
        name = name or getattr(func, "__name__", "call")

        for attempt in range(policy.max_attempts + 1):
            try:
                logger.debug(f"Executing {name} (attempt {attempt + 1}/{policy.max_attempts + 1})")
                result = func(*args, **kwargs)
                if attempt > 0:
                    logger.info(f"{name} succeeded after {attempt + 1} attempts")
                return result
            except Exception as e:
                if not policy.should_retry(e, attempt):
                    if attempt > 0:
                        raise RetryError(
                            f"{name} failed after {attempt + 1} attempts: {e}",
                            details={"attempts": attempt + 1},
                        ) from e
                    raise

                delay = policy.get_delay(attempt)
                logger.warning(f"{name} attempt {attempt + 1} failed: {e}. Retrying in {delay:.2f}s...")
                self._sleep(delay)

        # Should not reach here
        raise RuntimeError(f"Retry logic error for {name}")
