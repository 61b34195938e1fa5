"""
Credentials file loading.

The file holds the username on line 1 and the password on line 2; nothing is
escaped and any further lines are ignored.
"""

from __future__ import annotations

from pathlib import Path

from catalogpdf.exceptions import ConfigurationError
from catalogpdf.sync.types import Credentials
from catalogpdf.utils.logging import get_logger, redact

logger = get_logger("catalogpdf.sync.credentials")


def load_credentials(path: str | Path) -> Credentials:
    """
    Read a two-line credentials file.

    Raises:
        ConfigurationError: file missing/unreadable, fewer than two lines,
            or a blank username or password
    """
    path = Path(path)
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError as e:
        raise ConfigurationError(f"Cannot read credentials file {path}: {e}") from e

    if len(lines) < 2:
        raise ConfigurationError(
            f"Credentials file {path} must contain username and password on two lines, found {len(lines)}"
        )

    username = lines[0].strip()
    password = lines[1].strip()
    if not username or not password:
        raise ConfigurationError(f"Credentials file {path} has an empty username or password")

    redact(password)
    logger.debug(f"Loaded credentials for user '{username}' from {path}")
    return Credentials(username=username, password=password)
