"""
Utilities package for the Balance Monitor.

Exports shared helpers for logging, timing and JSON path resolution.
Keep this package lightweight and free of vendor-specific logic.
"""

from balance_monitor.utils.json_path import NOT_FOUND, resolve, resolve_optional
from balance_monitor.utils.logging import configure_logging, get_logger
from balance_monitor.utils.timing import Stopwatch, stopwatch

__all__ = [
    "NOT_FOUND",
    "resolve",
    "resolve_optional",
    "configure_logging",
    "get_logger",
    "Stopwatch",
    "stopwatch",
]
