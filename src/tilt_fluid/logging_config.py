# MIT License (see LICENSE)
"""
Logging setup for hosts and demos.

Library modules only create ``logging.getLogger(__name__)`` loggers and
never configure anything; a host that wants to see the session lifecycle,
wall sweeps or engine failures calls setup_logging() once.
"""
import logging
import sys
from typing import Optional, TextIO

LOGGER_NAME = "tilt_fluid"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%H:%M:%S"

# Handlers installed here carry this attribute so a repeated call replaces
# them without touching handlers the host added itself.
_OWNED = "_tilt_fluid_handler"


def _owned(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    setattr(handler, _OWNED, True)
    return handler


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Send the package's log records to a console stream and optionally a file.

    Args:
        level: Threshold for the package logger and its handlers.
        log_file: Optional path; the file is truncated on every call.
        stream: Console stream, stdout by default.

    Returns:
        The configured "tilt_fluid" logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    for handler in [h for h in logger.handlers if getattr(h, _OWNED, False)]:
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(_owned(logging.StreamHandler(stream or sys.stdout), level))
    if log_file:
        logger.addHandler(_owned(logging.FileHandler(log_file, mode="w", encoding="utf-8"), level))

    logger.info(f"Logging initialized at {logging.getLevelName(level)}")
    return logger
