"""Logging setup for reflens.

Modules log through ``logging.getLogger(__name__)`` under the ``reflens``
namespace. The library installs only a NullHandler; applications opt into
console output with ``enable_console_logging``.
"""

from __future__ import annotations

import logging
import sys

LOGGER_NAME = "reflens"

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"

logging.getLogger(LOGGER_NAME).addHandler(logging.NullHandler())


def _coerce_level(level: str | int) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return level


def set_log_level(level: str | int) -> None:
    """Set the level of the ``reflens`` logger and any handlers attached to it.

    Args:
        level: Log level as string ("debug", "info", "warning", "error")
               or int (logging.DEBUG, logging.INFO, etc.).
    """
    logger = logging.getLogger(LOGGER_NAME)
    level = _coerce_level(level)
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)


def enable_console_logging(level: str | int = logging.INFO) -> logging.Handler:
    """Attach a stdout handler to the ``reflens`` logger and return it."""
    logger = logging.getLogger(LOGGER_NAME)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATEFMT))
    logger.addHandler(handler)
    set_log_level(level)
    return handler
