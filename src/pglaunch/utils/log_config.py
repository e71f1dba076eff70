"""Diagnostic logging setup."""

import sys

from loguru import logger

LOG_FORMAT = "<dim>{time:HH:mm:ss}</dim> <level>{level: <7}</level> {message}"


def configure_logging(debug: bool = False) -> None:
    """Route loguru to stderr; DEBUG shows every delegated command."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if debug else "WARNING", format=LOG_FORMAT)
