"""
Logging for catalogpdf.

Everything logs below the ``catalogpdf`` logger. The CLI attaches a console
handler (rich or plain) and optionally a log file; library use without any
setup still gets warnings on stderr.

Loaded passwords are registered with ``redact()`` and masked in every record
that passes through catalogpdf handlers.
"""

import logging
import sys
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from rich.logging import RichHandler

ROOT_LOGGER_NAME = "catalogpdf"
DEFAULT_LOG_FILE = "logs/catalogpdf.log"
REDACTED = "***"

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_secrets: set[str] = set()
_secrets_lock = threading.Lock()


def redact(secret: str) -> None:
    """Mask ``secret`` in all catalogpdf log output from now on."""
    if secret:
        with _secrets_lock:
            _secrets.add(secret)


class SecretFilter(logging.Filter):
    """Replaces registered secrets in the rendered message."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not _secrets:
            return True
        message = record.getMessage()
        masked = message
        for secret in _secrets:
            masked = masked.replace(secret, REDACTED)
        if masked != message:
            record.msg, record.args = masked, None
        return True


class FileFormatter(logging.Formatter):
    """One line per record in the file, tracebacks appended verbatim."""

    def __init__(self) -> None:
        super().__init__(fmt="%(asctime)s [%(levelname)-8s] %(name)s: %(message)s", datefmt=_DATE_FORMAT)


class ConsoleFormatter(logging.Formatter):
    """``LEVEL: time - message``; errors also show file:line."""

    def __init__(self) -> None:
        super().__init__(datefmt=_DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        where = ""
        if record.levelno >= logging.ERROR:
            where = f"{Path(record.pathname).name}:{record.lineno} - "
        line = f"{record.levelname}: {self.formatTime(record)} - {where}{record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


@dataclass
class LoggingSettings:
    """The ``logging:`` config section with defaults applied."""

    level: int = logging.INFO
    console: bool = True
    console_type: str = "rich"
    console_format: str | None = None
    file: Path | None = None
    file_mode: str = "a"

    @classmethod
    def from_config(cls, section: dict[str, Any] | None, project_dir: Path | None = None) -> "LoggingSettings":
        section = section or {}
        log_file = None
        if section.get("file_enabled", True):
            log_file = Path(section.get("file") or DEFAULT_LOG_FILE)
            if project_dir is not None and not log_file.is_absolute():
                log_file = project_dir / log_file
        return cls(
            level=level_from_name(section.get("level")),
            console=bool(section.get("console_enabled", True)),
            console_type=str(section.get("console_type", "rich")),
            console_format=section.get("format"),
            file=log_file,
            file_mode=str(section.get("file_mode", "a")),
        )


def level_from_name(level: str | int | None) -> int:
    """``"debug"``/``"INFO"``/``10`` to a logging level; unknown names mean INFO."""
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        value = logging.getLevelName(level.strip().upper())
        if isinstance(value, int):
            return value
    return logging.INFO


def _console_handler(settings: LoggingSettings) -> logging.Handler:
    if settings.console_type == "rich":
        return RichHandler(
            level=settings.level,
            show_path=settings.level <= logging.DEBUG,
            markup=False,
            rich_tracebacks=True,
            log_time_format="[%X]",
        )
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(settings.level)
    if settings.console_format:
        handler.setFormatter(logging.Formatter(settings.console_format, datefmt=_DATE_FORMAT))
    else:
        handler.setFormatter(ConsoleFormatter())
    return handler


def _file_handler(settings: LoggingSettings) -> logging.Handler:
    assert settings.file is not None
    settings.file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(settings.file, mode=settings.file_mode, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(FileFormatter())
    return handler


def configure(settings: LoggingSettings) -> logging.Logger:
    """Replace the catalogpdf handlers according to ``settings``."""
    global _configured

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(settings.level)

    handlers = []
    if settings.console:
        handlers.append(_console_handler(settings))
    if settings.file is not None:
        handlers.append(_file_handler(settings))
    for handler in handlers:
        handler.addFilter(SecretFilter())
        logger.addHandler(handler)

    # paramiko logs banner and auth steps at INFO
    logging.getLogger("paramiko").setLevel(max(settings.level, logging.WARNING))

    _configured = True
    return logger


def setup_logging(
    level: str | int = logging.INFO,
    log_file: str | Path | None = None,
    format_string: str | None = None,
    file_mode: str = "a",
    console_enabled: bool = True,
    use_rich: bool = True,
) -> logging.Logger:
    """
    Configure console (and optionally file) logging for catalogpdf.

    Args:
        level: Level name or number
        log_file: Also write every record to this file
        format_string: Format for the plain console handler
        file_mode: 'a' appends to the log file, 'w' truncates it
        console_enabled: Attach a console handler at all
        use_rich: Use rich for the console instead of the plain formatter

    Returns:
        The ``catalogpdf`` logger
    """
    return configure(
        LoggingSettings(
            level=level_from_name(level),
            console=console_enabled,
            console_type="rich" if use_rich else "plain",
            console_format=format_string,
            file=Path(log_file) if log_file else None,
            file_mode=file_mode,
        )
    )


def setup_logging_from_config(config: dict[str, Any], project_dir: Path | None = None) -> logging.Logger:
    """Configure logging from the ``logging:`` section of a loaded config."""
    return configure(LoggingSettings.from_config(config.get("logging"), project_dir))


_configured = False
_configure_lock = threading.Lock()


def _ensure_fallback_handler() -> None:
    global _configured

    if _configured:
        return
    with _configure_lock:
        if _configured:
            return
        logger = logging.getLogger(ROOT_LOGGER_NAME)
        # Leave the application in charge when it configured the root logger
        if not logger.handlers and not logging.getLogger().handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setLevel(logging.WARNING)
            handler.setFormatter(ConsoleFormatter())
            handler.addFilter(SecretFilter())
            logger.addHandler(handler)
        _configured = True


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Logger for ``name``, which should sit below ``catalogpdf``."""
    _ensure_fallback_handler()
    return logging.getLogger(name)
