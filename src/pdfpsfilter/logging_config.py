"""Logging configuration for pdfpsfilter.

Standard output carries the print data, so every handler writes to stderr
(or a file). Console records use the CUPS message prefixes so the scheduler
can file them under the right log level.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

# Package-level logger name
LOGGER_NAME = "pdfpsfilter"


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger for a pdfpsfilter module.

    Args:
        name: Module name (e.g., __name__). If None, returns root pdfpsfilter logger.

    Returns:
        Logger instance
    """
    if name is None:
        return logging.getLogger(LOGGER_NAME)
    # Handle both 'pdfpsfilter.options' and 'options' styles
    if name == LOGGER_NAME or name.startswith(f"{LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


class CupsFormatter(logging.Formatter):
    """Formatter producing CUPS filter status lines.

    DEBUG: "DEBUG: message"
    INFO: "INFO: message"
    WARNING: "WARNING: message"
    ERROR and above: "ERROR: message"
    """

    PREFIXES = {
        logging.DEBUG: "DEBUG",
        logging.INFO: "INFO",
        logging.WARNING: "WARNING",
    }

    def format(self, record: logging.LogRecord) -> str:
        prefix = self.PREFIXES.get(record.levelno, "ERROR")
        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return f"{prefix}: {message}"


def setup_logging(
    verbosity: int = 0,
    quiet: bool = False,
    log_file: Path | None = None,
) -> None:
    """Configure logging for the filter process.

    Args:
        verbosity: 0=normal, 1 or more=debug (-v)
        quiet: If True, suppress all output except errors
        log_file: Optional file path for logging
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()

    if quiet:
        console_level = logging.ERROR
    elif verbosity >= 1:
        console_level = logging.DEBUG
    else:
        console_level = logging.INFO

    # Capture everything at logger level, filter at handlers
    logger.setLevel(logging.DEBUG)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(console_level)
    stderr_handler.setFormatter(CupsFormatter())
    logger.addHandler(stderr_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(process)d - %(name)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(file_handler)


def console_debug_enabled() -> bool:
    """True if debug records reach the console (stderr) handler."""
    logger = logging.getLogger(LOGGER_NAME)
    return any(
        isinstance(handler, logging.StreamHandler)
        and not isinstance(handler, logging.FileHandler)
        and handler.level <= logging.DEBUG
        for handler in logger.handlers
    )
