"""
Notification sinks for scheduler events.

The scheduler emits two event shapes: `StatusChangeEvent` when a target's
monitor starts or stops, and `BalanceUpdateEvent` after every tick. A UI (or
any other consumer) implements the `Notifier` protocol. Delivery is
fire-and-forget: the scheduler logs and drops exceptions raised by a sink.
"""

from __future__ import annotations

from typing import Callable, Optional, Protocol

from balance_monitor.domain.models import BalanceUpdateEvent, StatusChangeEvent
from balance_monitor.utils.logging import get_logger

log = get_logger(__name__)


class Notifier(Protocol):
    def status_change(self, event: StatusChangeEvent) -> None: ...

    def balance_update(self, event: BalanceUpdateEvent) -> None: ...


class LoggingNotifier:
    """Default sink: write events to the log at DEBUG level."""

    def status_change(self, event: StatusChangeEvent) -> None:
        log.debug(f"status-change {event.to_payload()}", extra={"target_id": event.config_id})

    def balance_update(self, event: BalanceUpdateEvent) -> None:
        log.debug(f"balance-update {event.to_payload()}", extra={"target_id": event.config_id})


class CallbackNotifier:
    """Adapt plain callables to the Notifier protocol; either may be omitted."""

    def __init__(
        self,
        on_status_change: Optional[Callable[[StatusChangeEvent], None]] = None,
        on_balance_update: Optional[Callable[[BalanceUpdateEvent], None]] = None,
    ) -> None:
        self._on_status_change = on_status_change
        self._on_balance_update = on_balance_update

    def status_change(self, event: StatusChangeEvent) -> None:
        if self._on_status_change is not None:
            self._on_status_change(event)

    def balance_update(self, event: BalanceUpdateEvent) -> None:
        if self._on_balance_update is not None:
            self._on_balance_update(event)


__all__ = ["CallbackNotifier", "LoggingNotifier", "Notifier"]
