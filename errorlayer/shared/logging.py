"""
Logging configuration for the application.

Sets up structured logging with a consistent format.
Error records may carry a ``stack`` extra; it is only a non-empty
string in development mode, and only then is it rendered.
"""

import logging
import sys

from errorlayer.core.config import DisclosureMode

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class DiagnosticFormatter(logging.Formatter):
    """Formatter that appends a record's diagnostic trace when present."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        stack = getattr(record, "stack", None)
        if isinstance(stack, str) and stack:
            return f"{line}\n{stack.rstrip()}"
        return line


def configure_logging(
    level: str = "INFO", mode: DisclosureMode = DisclosureMode.PRODUCTION
) -> None:
    """Configure structured logging for the application.

    Args:
        level: The log level string (DEBUG, INFO, WARNING, ERROR).
        mode: Disclosure mode. Uvicorn loggers stay at INFO in development.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(DiagnosticFormatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=[handler],
        force=True,
    )

    quiet = logging.INFO if mode is DisclosureMode.DEVELOPMENT else logging.WARNING
    logging.getLogger("uvicorn.access").setLevel(quiet)
    logging.getLogger("uvicorn.error").setLevel(quiet)
