"""Logging setup shared by the server and the command line tools."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# RPC request/response audit lines go through this logger.
ACCESS_LOGGER_NAME = "remark_mongo.access"


def configure_logging(level: str = "INFO") -> None:
    """Attach a single stream handler to the package logger.

    Calling this more than once replaces the previous handler instead of
    stacking a new one.

    Args:
        level: Name of the minimum level to emit (e.g. ``"INFO"``).
    """
    root = logging.getLogger("remark_mongo")
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(logging.getLevelName(level.upper()))
    root.propagate = False


def get_access_logger() -> logging.Logger:
    """Return the logger used for RPC audit lines."""
    return logging.getLogger(ACCESS_LOGGER_NAME)
