"""
Pytest configuration for the Balance Monitor.

Provides fixtures for:
- Settings with test-friendly values
- A default strategy registry and parser facade
- A manual timer factory so scheduler ticks are driven by hand
- A recording notifier capturing scheduler events
- Target and mock-HTTP request engine factories
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, List

import httpx
import pytest

from balance_monitor.config import Settings
from balance_monitor.domain.models import (
    BalanceUpdateEvent,
    MonitorTarget,
    RequestDescriptor,
    StatusChangeEvent,
)
from balance_monitor.infrastructure.http_engine import RequestEngine
from balance_monitor.parser import BalanceParser
from balance_monitor.strategies.registry import StrategyRegistry, build_default_registry

FIXED_NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)

DEEPSEEK_RESPONSE = {
    "is_available": True,
    "balance_infos": [
        {
            "currency": "CNY",
            "total_balance": "44.35",
            "granted_balance": "0.00",
            "topped_up_balance": "44.35",
        }
    ],
}


class ManualTimer:
    def __init__(self, interval_seconds: float, callback, name: str) -> None:
        self.interval_seconds = interval_seconds
        self.name = name
        self._callback = callback
        self.cancelled = False

    @property
    def active(self) -> bool:
        return not self.cancelled

    def cancel(self) -> None:
        self.cancelled = True

    async def fire(self) -> Any:
        if self.cancelled:
            return None
        return await self._callback()


class ManualTimerFactory:
    def __init__(self) -> None:
        self.timers: List[ManualTimer] = []

    def call_every(self, interval_seconds: float, callback, name: str) -> ManualTimer:
        timer = ManualTimer(interval_seconds, callback, name)
        self.timers.append(timer)
        return timer

    def active_for(self, name: str) -> List[ManualTimer]:
        return [t for t in self.timers if t.name == name and t.active]


class RecordingNotifier:
    def __init__(self) -> None:
        self.status_events: List[StatusChangeEvent] = []
        self.balance_events: List[BalanceUpdateEvent] = []

    def status_change(self, event: StatusChangeEvent) -> None:
        self.status_events.append(event)

    def balance_update(self, event: BalanceUpdateEvent) -> None:
        self.balance_events.append(event)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        log_level="DEBUG",
        http_default_timeout_ms=2_000,
        http_connect_retries=0,
        monitor_min_interval_seconds=5,
    )


@pytest.fixture
def deepseek_response() -> dict:
    return DEEPSEEK_RESPONSE


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def registry() -> StrategyRegistry:
    return build_default_registry()


@pytest.fixture
def parser(registry: StrategyRegistry) -> BalanceParser:
    return BalanceParser(registry)


@pytest.fixture
def timer_factory() -> ManualTimerFactory:
    return ManualTimerFactory()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def make_target() -> Callable[..., MonitorTarget]:
    def _make(**overrides: Any) -> MonitorTarget:
        request = overrides.pop("request", None) or RequestDescriptor(
            url=overrides.pop("url", "https://api.example.com/user/balance")
        )
        fields = {
            "id": "deepseek-main",
            "name": "DeepSeek main key",
            "request": request,
            "strategy_id": "deepseek",
            "interval_seconds": 30,
            "warning_threshold": 50.0,
            "danger_threshold": 10.0,
        }
        fields.update(overrides)
        return MonitorTarget(**fields)

    return _make


@pytest.fixture
def make_engine(test_settings: Settings) -> Callable[[Callable[[httpx.Request], Any]], RequestEngine]:
    """Build a RequestEngine whose HTTP traffic is served by `handler`."""

    def _make(handler: Callable[[httpx.Request], Any]) -> RequestEngine:
        return RequestEngine(transport=httpx.MockTransport(handler), settings=test_settings)

    return _make
