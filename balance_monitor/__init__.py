"""
Balance Monitor - scheduled balance polling for third-party HTTP APIs.

This package polls vendor billing endpoints on a schedule, extracts a
normalized balance from heterogeneous JSON response shapes, and raises
threshold-based alerts:

- Vendor strategies mapping each vendor's JSON to a StandardBalance
- A registry and parser facade dispatching responses by strategy id
- An HTTP request engine returning uniform success/failure envelopes
- A scheduler owning one recurring timer per monitored target
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from balance_monitor.config import Settings, get_settings
from balance_monitor.domain.models import MonitorRunState, MonitorTarget, RequestDescriptor, StandardBalance
from balance_monitor.infrastructure.http_engine import RequestEngine
from balance_monitor.parser import BalanceParser
from balance_monitor.scheduler import MonitorScheduler
from balance_monitor.strategies import (
    AbstractVendorStrategy,
    PathMappingStrategy,
    StrategyRegistry,
    VendorStrategy,
    build_default_registry,
)
from balance_monitor.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "MonitorRunState",
    "MonitorTarget",
    "RequestDescriptor",
    "StandardBalance",
    # Core components
    "BalanceParser",
    "MonitorScheduler",
    "RequestEngine",
    # Strategies
    "AbstractVendorStrategy",
    "PathMappingStrategy",
    "StrategyRegistry",
    "VendorStrategy",
    "build_default_registry",
    # Logging
    "configure_logging",
    "get_logger",
]
