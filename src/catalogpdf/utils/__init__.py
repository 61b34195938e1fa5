"""
Shared utilities: logging setup and sync/async bridging.
"""

from catalogpdf.utils.async_utils import dual
from catalogpdf.utils.logging import get_logger, redact, setup_logging, setup_logging_from_config

__all__ = [
    "dual",
    "get_logger",
    "redact",
    "setup_logging",
    "setup_logging_from_config",
]
