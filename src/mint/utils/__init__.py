"""Utility modules for mint."""

from .console import console
from .logging import configure_logging, get_logger
from .subprocess_utils import run, run_git_command

__all__ = ["console", "configure_logging", "get_logger", "run", "run_git_command"]
