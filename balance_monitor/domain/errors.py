"""
Error taxonomy for the Balance Monitor.

Request-engine errors are never raised to callers of `RequestEngine.execute`;
they are reported through `RequestResult.error_type` using the class names
below. Parser and path errors are raised, and the scheduler tick converts
them into failure notifications. `InvalidTarget` is the only error surfaced
synchronously from `MonitorScheduler.start`.
"""

from __future__ import annotations

from typing import Iterable, List, Optional


class BalanceMonitorError(Exception):
    """Base class for every error raised by the package."""


# Request engine


class RequestError(BalanceMonitorError):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class InvalidURL(RequestError):
    pass


class Timeout(RequestError):
    pass


class NetworkError(RequestError):
    pass


class HTTPError(RequestError):
    def __init__(self, message: str, status_code: int, body: str = "") -> None:
        super().__init__(message, status_code=status_code)
        self.body = body


class InvalidJSON(RequestError):
    pass


class InvalidHeaders(RequestError):
    pass


# Parser facade


class ParseError(BalanceMonitorError):
    pass


class EmptyResponse(ParseError):
    pass


class UnknownStrategy(ParseError):
    def __init__(self, strategy_id: str, available: Iterable[str] = ()) -> None:
        self.strategy_id = strategy_id
        self.available: List[str] = list(available)
        hint = f" Available: {', '.join(self.available)}" if self.available else ""
        super().__init__(f"Unknown strategy '{strategy_id}'.{hint}")


class StrategyParseError(ParseError):
    def __init__(self, strategy_id: str, cause: BaseException) -> None:
        self.strategy_id = strategy_id
        super().__init__(f"Parse failed ({strategy_id}): {cause}")


# Path extractor


class PathError(BalanceMonitorError):
    def __init__(self, message: str, path: str, token: Optional[str] = None) -> None:
        self.path = path
        self.token = token
        super().__init__(f"{message} (path '{path}')")


# Scheduler validation


class InvalidTarget(BalanceMonitorError):
    def __init__(self, target_id: str, violations: Iterable[str]) -> None:
        self.target_id = target_id
        self.violations: List[str] = list(violations)
        super().__init__(f"Invalid target '{target_id}': {'; '.join(self.violations)}")


__all__ = [
    "BalanceMonitorError",
    "RequestError",
    "InvalidURL",
    "Timeout",
    "NetworkError",
    "HTTPError",
    "InvalidHeaders",
    "InvalidJSON",
    "ParseError",
    "EmptyResponse",
    "UnknownStrategy",
    "StrategyParseError",
    "PathError",
    "InvalidTarget",
]
