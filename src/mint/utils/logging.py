"""Logging setup for mint."""

from __future__ import annotations

import logging
from typing import Optional

from rich.logging import RichHandler

from .console import console

_LOGGER_NAME = "mint"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger under the ``mint`` hierarchy."""
    if not name:
        return logging.getLogger(_LOGGER_NAME)
    if name == _LOGGER_NAME or name.startswith(f"{_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_LOGGER_NAME}.{name}")


def configure_logging(*, verbose: bool = False) -> logging.Logger:
    """Send ``mint`` log records to the shared console."""
    level = logging.DEBUG if verbose else logging.WARNING
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers to avoid duplicate output when the CLI runs more than once.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = RichHandler(console=console, show_path=verbose, markup=False)
    handler.setLevel(level)
    logger.addHandler(handler)
    return logger
