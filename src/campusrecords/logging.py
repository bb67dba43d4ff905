"""Logging setup for Campus Records.

Every module logs through ``logging.getLogger(__name__)``, so all records end
up under the ``campusrecords`` logger configured here.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from campusrecords.config import RecordsConfig

ROOT_LOGGER = "campusrecords"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(config: RecordsConfig, verbose: bool = False) -> logging.Logger:
    """Attach a rotating file handler, and optionally stderr, to the package logger.

    Calling it again replaces the handlers from the previous call.

    Args:
        config: Supplies the log directory (relative to root_path), file name,
            level and rotation limits.
        verbose: Log at DEBUG and echo records to stderr.

    Returns:
        The campusrecords logger.
    """
    settings = config.logging
    level = logging.DEBUG if verbose else getattr(logging, settings.level)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    log_dir = config.get_log_path()
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / settings.file

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: list[logging.Handler] = [
        RotatingFileHandler(
            log_path,
            maxBytes=settings.max_bytes,
            backupCount=settings.backup_count,
            encoding="utf-8",
        )
    ]
    if verbose:
        handlers.append(logging.StreamHandler())
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.info(
        "%s logging to %s at %s", config.name, log_path, logging.getLevelName(level)
    )
    return logger
