"""Shared helpers for mailaccess.

Interfaces:
  ``get_logger`` and ``JsonLogger`` from :mod:`mailaccess.utils.logging`.
"""

from .logging import JsonLogger, get_logger

__all__ = ["JsonLogger", "get_logger"]
