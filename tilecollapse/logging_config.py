"""
Console logging for tilecollapse.

Usage:
    from tilecollapse.logging_config import setup_logging
    setup_logging(verbose=True)  # once, at startup

Library modules only call logging.getLogger(__name__); nothing is printed
until an application installs a handler.
"""

import logging
import sys

LOGGER_NAME = "tilecollapse"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-28s | %(message)s"
DATE_FORMAT = "%H:%M:%S"


def setup_logging(verbose: bool = False) -> logging.Logger:
    """
    Attach a stderr handler to the tilecollapse logger. Calling it again
    replaces the handler instead of stacking another one.

    Args:
        verbose: log DEBUG (per-step progress) instead of INFO

    Returns:
        the configured package logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.handlers.clear()
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
