"""
Logging configuration for pr-preview.
"""

import sys
from typing import Optional

from loguru import logger


def configure_logging(verbose: bool = False) -> None:
    """Route loguru to stderr so stdout stays clean for JSON output."""

    logger.remove()
    logger.add(
        sys.stderr,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<blue>{name}</blue>:<blue>{function}</blue>:<blue>{line}</blue> - "
            "<level>{message}</level>"
        ),
        level="DEBUG" if verbose else "WARNING",
        colorize=None,
        backtrace=verbose,
        diagnose=False,
    )


def get_logger(name: Optional[str] = None):
    """Get a logger instance with optional name binding."""
    if name:
        return logger.bind(logger_name=name)
    return logger
