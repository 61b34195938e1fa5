"""
Caller-side retry with exponential backoff.
"""

from catalogpdf.retry.manager import RetryManager
from catalogpdf.retry.policy import DEFAULT_RENDER_RETRY_POLICY, NO_RETRY_POLICY, RetryPolicy

__all__ = [
    "DEFAULT_RENDER_RETRY_POLICY",
    "NO_RETRY_POLICY",
    "RetryManager",
    "RetryPolicy",
]
