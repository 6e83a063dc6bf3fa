"""Configuration management for mint."""

from .answers import load_answers
from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings", "load_answers"]
