# campus_connect/core/logging.py

import sys

from loguru import logger

from campus_connect.core.config import settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


def configure_logging() -> None:
    """Single stdout sink; tracebacks keep local variables outside prod."""
    logger.remove()
    logger.add(
        sys.stdout,
        level=settings.LOG_LEVEL.upper(),
        format=LOG_FORMAT,
        colorize=settings.ENV != "prod",
        backtrace=True,
        diagnose=settings.ENV != "prod",
        enqueue=settings.ENV == "prod",
    )
