"""
Logging configuration for Fortie.

The library itself only creates module loggers with
``logging.getLogger(__name__)``. Applications that want Fortie's output
formatted can call ``setup_logging``:

- Human-readable colored console output (default)
- Structured JSON lines (``structured=True``)
- Dynamic log level via FORTIE_LOG_LEVEL or ``set_log_level``
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import IO

DEFAULT_LOG_LEVEL = os.getenv("FORTIE_LOG_LEVEL", "INFO")
LIBRARY_LOGGER = "fortie"

_current_log_level = DEFAULT_LOG_LEVEL.upper()


class StructuredFormatter(logging.Formatter):
    """Formatter that outputs structured JSON logs."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if hasattr(record, "context") and record.context:
            log_data["context"] = record.context

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


class HumanFormatter(logging.Formatter):
    """Human-readable formatter for console output."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, colorize: bool = True) -> None:
        super().__init__()
        self.colorize = colorize

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "") if self.colorize else ""
        reset = self.RESET if self.colorize else ""
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]

        base_msg = f"[{timestamp}] {color}{record.levelname:8}{reset} | {record.name:30} | {record.getMessage()}"

        if hasattr(record, "context") and record.context:
            base_msg += f" | context={json.dumps(record.context, ensure_ascii=False, default=str)}"

        if record.exc_info:
            base_msg += f"\n{self.formatException(record.exc_info)}"

        return base_msg


def setup_logging(
    level: str | None = None,
    structured: bool = False,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """
    Attach a single handler to the ``fortie`` logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        structured: Emit JSON lines instead of human-readable text
        stream: Output stream, stderr by default

    Returns:
        The configured library logger
    """
    global _current_log_level

    if level:
        _current_log_level = level.upper()

    library_logger = logging.getLogger(LIBRARY_LOGGER)
    library_logger.setLevel(getattr(logging, _current_log_level, logging.INFO))

    for handler in library_logger.handlers[:]:
        library_logger.removeHandler(handler)

    output = stream or sys.stderr
    handler = logging.StreamHandler(output)
    if structured:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(HumanFormatter(colorize=output.isatty()))
    handler.setLevel(getattr(logging, _current_log_level, logging.INFO))
    library_logger.addHandler(handler)
    library_logger.propagate = False

    logging.getLogger("aiohttp").setLevel(logging.WARNING)

    return library_logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (usually __name__)
    """
    return logging.getLogger(name)


def set_log_level(level: str) -> None:
    """
    Dynamically set the log level.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    global _current_log_level
    _current_log_level = level.upper()

    library_logger = logging.getLogger(LIBRARY_LOGGER)
    library_logger.setLevel(getattr(logging, _current_log_level, logging.INFO))

    for handler in library_logger.handlers:
        handler.setLevel(getattr(logging, _current_log_level, logging.INFO))


def get_log_level() -> str:
    """Get the current log level."""
    return _current_log_level
