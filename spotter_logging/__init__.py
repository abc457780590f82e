"""Logging package."""
from .setup import LOG_FILE, setup_logging

__all__ = ["LOG_FILE", "setup_logging"]
