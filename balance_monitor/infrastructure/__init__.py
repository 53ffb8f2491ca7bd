"""
Infrastructure package for the Balance Monitor.

Centralizes I/O concerns: the HTTP request engine, recurring timers, and
target sources. Keep this layer focused on I/O and resource management,
decoupled from strategy and scheduling logic.
"""

from balance_monitor.infrastructure.http_engine import RequestEngine, build_headers
from balance_monitor.infrastructure.target_store import (
    InMemoryTargetStore,
    TargetProvider,
    load_targets_file,
)
from balance_monitor.infrastructure.timers import AsyncioTimerFactory, TimerFactory, TimerHandle

__all__ = [
    "AsyncioTimerFactory",
    "InMemoryTargetStore",
    "RequestEngine",
    "TargetProvider",
    "TimerFactory",
    "TimerHandle",
    "build_headers",
    "load_targets_file",
]
