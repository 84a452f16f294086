"""Logging configuration for the application."""

import logging
import sys

from codeshare.config import Settings


def setup_logging(settings: Settings) -> None:
    """Configure application logging.

    DEBUG mode forces DEBUG level; otherwise LOG_LEVEL from settings is used.

    Args:
        settings: Application settings
    """
    if settings.DEBUG:
        level = logging.DEBUG
    else:
        level = logging.getLevelName(settings.LOG_LEVEL.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )

    # Third-party loggers stay quiet unless something is wrong
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.WARNING)

    logging.getLogger("codeshare").setLevel(level)

    logger = logging.getLogger(__name__)
    logger.info("Logging configured: level=%s", logging.getLevelName(level))
