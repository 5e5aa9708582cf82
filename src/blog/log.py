"""Logging setup shared by the command-line entry points."""

from __future__ import annotations

import logging
import sys

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"


def setup_logging(log_level: str = "WARNING") -> None:
    """Route ``blog.*`` loggers to stderr at *log_level*.

    Safe to call more than once; the previous handler is replaced.
    """
    numeric_level = getattr(logging, log_level.upper(), logging.WARNING)

    logger = logging.getLogger("blog")
    logger.setLevel(numeric_level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    logger.addHandler(handler)
