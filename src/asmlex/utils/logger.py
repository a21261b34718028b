"""Minimal logging utilities for asmlex.

Provides a simple get_logger function that wraps the standard library logging.

Example:
    >>> from asmlex.utils.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("Built rule table")
"""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given name.

    Returns a standard library logger with the "asmlex." prefix.

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger instance

    Example:
        >>> logger = get_logger("mymodule")
        >>> logger.name
        'asmlex.mymodule'
    """
    if not (name == "asmlex" or name.startswith("asmlex.")):
        name = f"asmlex.{name}"
    return logging.getLogger(name)
