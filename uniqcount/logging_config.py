"""Logging setup helpers for uniqcount.

The library installs only a NullHandler, so importing it prints nothing.
Applications (including the ``uniqcount`` command) opt in through the
functions below.

Example usage:
    import uniqcount

    uniqcount.enable_console_logging(level="DEBUG")
    uniqcount.enable_file_logging("logs/trials.log", max_bytes=5_000_000)
    uniqcount.enable_json_logging()
    uniqcount.configure_from_env()

Environment variables read by configure_from_env():
    UC_LOGGING: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    UC_LOG_FILE: Path to a rotating log file
    UC_LOG_JSON: "1" switches output to one JSON object per line
"""

from __future__ import annotations

import json
import logging
import os
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Literal

__all__ = [
    "configure_from_env",
    "disable_logging",
    "enable_console_logging",
    "enable_file_logging",
    "enable_json_logging",
    "set_level",
]

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
DEFAULT_BACKUP_COUNT = 5

LOGGER_NAME = "uniqcount"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class JsonFormatter(logging.Formatter):
    """Render each record as a single-line JSON object.

    Example output:
        {"timestamp": "2026-01-15T10:30:00.123456+00:00", "level": "INFO",
         "logger": "uniqcount.experiment.trials", "message": "Running 20 trials"}
    """

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def _get_level(level: str | int) -> int:
    """Map a level name or number to a logging level constant."""
    if isinstance(level, int):
        return level
    return getattr(logging, level.upper(), logging.INFO)


def _get_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


def _clear_handlers() -> None:
    """Detach and close every non-null handler on the package logger."""
    logger = _get_logger()
    for handler in logger.handlers[:]:
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)
            handler.close()


def _install(handler: logging.Handler, level: LogLevel | int) -> None:
    logger = _get_logger()
    logger.setLevel(_get_level(level))
    handler.setLevel(_get_level(level))
    logger.addHandler(handler)


def enable_console_logging(
    level: LogLevel | int = "INFO",
    format: str = DEFAULT_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> logging.StreamHandler:
    """Send uniqcount log records to stderr.

    Args:
        level: Log level name or number.
        format: Log message format string.
        date_format: Date format string for %(asctime)s.

    Returns:
        The installed StreamHandler.
    """
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(format, date_format))
    _install(handler, level)
    return handler


def enable_file_logging(
    path: str | Path,
    level: LogLevel | int = "INFO",
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    format: str = DEFAULT_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> RotatingFileHandler:
    """Write uniqcount log records to a size-rotated file.

    Args:
        path: Log file path. Missing parent directories are created.
        level: Log level name or number.
        max_bytes: Size at which the file is rolled over.
        backup_count: Number of rolled-over files to keep.
        format: Log message format string.
        date_format: Date format string for %(asctime)s.

    Returns:
        The installed RotatingFileHandler.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count)
    handler.setFormatter(logging.Formatter(format, date_format))
    _install(handler, level)
    return handler


def enable_json_logging(
    level: LogLevel | int = "INFO",
    path: str | Path | None = None,
) -> logging.Handler:
    """Emit JSON log lines to stderr, or to a rotating file when path is set."""
    if path is None:
        handler: logging.Handler = logging.StreamHandler()
    else:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            path, maxBytes=DEFAULT_MAX_BYTES, backupCount=DEFAULT_BACKUP_COUNT
        )
    handler.setFormatter(JsonFormatter())
    _install(handler, level)
    return handler


def configure_from_env() -> None:
    """Configure logging from UC_LOGGING, UC_LOG_FILE and UC_LOG_JSON.

    Does nothing when neither UC_LOGGING nor UC_LOG_FILE is set.
    """
    level = os.environ.get("UC_LOGGING", "").upper()
    log_file = os.environ.get("UC_LOG_FILE", "")
    use_json = os.environ.get("UC_LOG_JSON", "") == "1"

    if not level and not log_file:
        return

    level = level or "INFO"

    if use_json:
        enable_json_logging(level=level, path=log_file or None)
    elif log_file:
        enable_file_logging(log_file, level=level)
    else:
        enable_console_logging(level=level)


def set_level(level: LogLevel | int, module: str | None = None) -> None:
    """Set the level of the package logger, or of one submodule.

    Args:
        level: Log level name or number.
        module: Submodule name relative to uniqcount, e.g. "experiment.trials".
    """
    name = LOGGER_NAME if module is None else f"{LOGGER_NAME}.{module}"
    logging.getLogger(name).setLevel(_get_level(level))


def disable_logging() -> None:
    """Remove all handlers and silence the package logger."""
    logger = _get_logger()
    _clear_handlers()
    logger.addHandler(logging.NullHandler())
    logger.setLevel(logging.CRITICAL + 1)
