"""Logging setup for applications embedding knitcalc."""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(filename)s:%(lineno)d %(funcName)s()] %(message)s"


def setup_logging(
    name: str = "knitcalc",
    level: int = logging.INFO,
    log_file: str | None = None,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
) -> logging.Logger:
    """Configure a stream handler and, optionally, a rotating file handler.

    The library itself only installs a ``NullHandler``; applications call this
    once at startup to see engine output.

    Args:
        name: Logger name. Defaults to the package root so every module logger
            inherits the handlers.
        level: Logging level for the named logger.
        log_file: Path of a log file. When ``None`` only the stream handler
            is installed. Parent directories are created as needed.
        max_bytes: Size at which the log file rotates.
        backup_count: Number of rotated files kept.

    Returns:
        The configured logger.
    """
    logger = logging.getLogger(name)
    # Clear existing handlers to avoid duplicate logs on repeated setup
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)

    if log_file is not None:
        directory = os.path.dirname(os.path.abspath(log_file))
        os.makedirs(directory, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    logger.setLevel(level)
    return logger
