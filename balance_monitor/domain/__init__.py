"""
Domain package for the Balance Monitor.

Exports the core domain models, error taxonomy and classification rules used
across strategies, the request engine and the scheduler. Keep this package
focused on data definitions and validation concerns.
"""

from balance_monitor.domain.errors import (
    BalanceMonitorError,
    EmptyResponse,
    HTTPError,
    InvalidHeaders,
    InvalidJSON,
    InvalidTarget,
    InvalidURL,
    NetworkError,
    ParseError,
    PathError,
    RequestError,
    StrategyParseError,
    Timeout,
    UnknownStrategy,
)
from balance_monitor.domain.models import (
    AuthDescriptor,
    BalanceUpdateEvent,
    BulkResult,
    HeaderEntry,
    MonitorRunState,
    MonitorTarget,
    RequestDescriptor,
    RequestResult,
    StandardBalance,
    StartResult,
    StatusChangeEvent,
    TickOutcome,
)
from balance_monitor.domain.thresholds import classify_balance, default_status

__all__ = [
    # Models
    "AuthDescriptor",
    "BalanceUpdateEvent",
    "BulkResult",
    "HeaderEntry",
    "MonitorRunState",
    "MonitorTarget",
    "RequestDescriptor",
    "RequestResult",
    "StandardBalance",
    "StartResult",
    "StatusChangeEvent",
    "TickOutcome",
    # Errors
    "BalanceMonitorError",
    "EmptyResponse",
    "HTTPError",
    "InvalidHeaders",
    "InvalidJSON",
    "InvalidTarget",
    "InvalidURL",
    "NetworkError",
    "ParseError",
    "PathError",
    "RequestError",
    "StrategyParseError",
    "Timeout",
    "UnknownStrategy",
    # Classification
    "classify_balance",
    "default_status",
]
