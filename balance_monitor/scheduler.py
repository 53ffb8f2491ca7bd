"""
Monitor scheduler: one recurring timer per target, driving fetch-parse-classify.

Usage:
    engine = RequestEngine()
    parser = BalanceParser(build_default_registry())

    async with MonitorScheduler(engine, parser, notifier=my_ui) as scheduler:
        await scheduler.start(target)
        ...

Each tick calls the request engine, then the parser facade, updates the
target's run state and emits a `balance-update` notification. Tick failures
(request or parse) are counted and reported, never raised, and never stop the
timer: only `stop`, `stop_all` or `destroy` halt monitoring. `InvalidTarget`
is the one error raised to callers, from `start`.

State changes happen on the event loop thread only; timers and run states
are keyed by target id, and starting a running target replaces its timer
before any await so two timers are never armed for the same id.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional, Union

from balance_monitor.config import Settings, get_settings
from balance_monitor.domain.errors import InvalidTarget, ParseError
from balance_monitor.domain.models import (
    BalanceUpdateEvent,
    BulkResult,
    MonitorRunState,
    MonitorTarget,
    StartResult,
    StatusChangeEvent,
    TickOutcome,
    utc_now,
)
from balance_monitor.domain.thresholds import classify_balance
from balance_monitor.infrastructure.http_engine import RequestEngine, is_valid_url
from balance_monitor.infrastructure.target_store import TargetProvider
from balance_monitor.infrastructure.timers import AsyncioTimerFactory, TimerFactory, TimerHandle
from balance_monitor.notifications import LoggingNotifier, Notifier
from balance_monitor.parser import BalanceParser
from balance_monitor.utils.logging import get_logger

log = get_logger(__name__)

TargetRef = Union[MonitorTarget, str]


def validate_target(target: MonitorTarget, min_interval_seconds: int = 5) -> List[str]:
    """Return every configuration violation for `target` (empty when valid)."""
    violations: List[str] = []
    if not target.name or not target.name.strip():
        violations.append("name must not be empty")
    if not is_valid_url(target.request.url):
        violations.append(f"url must be a valid http(s) URL: {target.request.url!r}")
    if not target.strategy_id or not target.strategy_id.strip():
        violations.append("strategy_id must not be empty")
    if target.interval_seconds < min_interval_seconds:
        violations.append(f"interval must be at least {min_interval_seconds}s")
    if target.warning_threshold <= target.danger_threshold:
        violations.append("warning threshold must be greater than danger threshold")
    return violations


def _target_id(target: TargetRef) -> str:
    return target if isinstance(target, str) else target.id


class MonitorScheduler:
    def __init__(
        self,
        engine: RequestEngine,
        parser: BalanceParser,
        notifier: Optional[Notifier] = None,
        targets: Optional[TargetProvider] = None,
        timer_factory: Optional[TimerFactory] = None,
        clock: Callable[[], datetime] = utc_now,
        settings: Optional[Settings] = None,
    ) -> None:
        self._engine = engine
        self._parser = parser
        self._notifier = notifier or LoggingNotifier()
        self._targets = targets
        self._timer_factory = timer_factory or AsyncioTimerFactory()
        self._clock = clock
        self._settings = settings or get_settings()

        self._timers: Dict[str, TimerHandle] = {}
        self._states: Dict[str, MonitorRunState] = {}

    async def __aenter__(self) -> "MonitorScheduler":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        del exc_type, exc, tb
        self.destroy()

    # Lifecycle

    async def start(self, target: MonitorTarget) -> StartResult:
        """
        Start (or restart) monitoring `target`.

        Any existing timer for the id is torn down first. Runs one tick
        immediately, then every `interval_seconds`.

        Raises
        ------
        InvalidTarget
            Listing every violation, when the target definition is invalid.
        """
        if target.id in self._timers:
            self.stop(target.id)

        violations = validate_target(target, self._settings.monitor_min_interval_seconds)
        if violations:
            raise InvalidTarget(target.id, violations)

        now = self._clock()
        state = MonitorRunState(
            target_id=target.id,
            status="running",
            next_run=now + timedelta(seconds=target.interval_seconds),
        )
        self._states[target.id] = state
        self._timers[target.id] = self._timer_factory.call_every(
            target.interval_seconds, lambda: self._tick(target), name=target.id
        )
        log.success(
            f"Started monitor: {target.name} (interval {target.interval_seconds}s)",
            extra={"target_id": target.id},
        )
        self._emit_status(state)

        await self._tick(target)
        return StartResult(success=True, message="Monitor started")

    async def start_by_id(self, target_id: str) -> StartResult:
        """Look the target up in the provider and start it; never raises."""
        target = self._targets.get_target(target_id) if self._targets is not None else None
        if target is None:
            return StartResult(success=False, message=f"Target not found: {target_id}")
        try:
            return await self.start(target)
        except InvalidTarget as exc:
            return StartResult(success=False, message=str(exc))

    async def start_all(self, targets: Optional[Iterable[MonitorTarget]] = None) -> BulkResult:
        """
        Start every enabled target (from `targets` or the provider).

        Individual failures are counted, not raised.
        """
        if targets is None:
            targets = self._targets.list_targets() if self._targets is not None else []
        enabled = [target for target in targets if target.enabled]
        if not enabled:
            return BulkResult(success=False, message="No enabled monitor targets")

        started = failed = 0
        for target in enabled:
            try:
                await self.start(target)
                started += 1
            except InvalidTarget as exc:
                failed += 1
                log.error(str(exc), extra={"target_id": target.id})

        message = f"Started {started} monitor(s)" + (f", {failed} failed" if failed else "")
        return BulkResult(success=started > 0, message=message, started=started, failed=failed)

    def stop(self, target: TargetRef) -> bool:
        """Cancel the target's timer. Returns False if it was not running."""
        target_id = _target_id(target)
        timer = self._timers.pop(target_id, None)
        if timer is None:
            return False
        timer.cancel()

        state = self._states.get(target_id)
        if state is not None:
            state.status = "stopped"
            state.next_run = None
            self._emit_status(state)
        log.info(f"Stopped monitor: {target_id}", extra={"target_id": target_id})
        return True

    def stop_all(self) -> BulkResult:
        stopped = sum(1 for target_id in list(self._timers) if self.stop(target_id))
        return BulkResult(success=stopped > 0, message=f"Stopped {stopped} monitor(s)", stopped=stopped)

    async def reload(self, target: MonitorTarget) -> bool:
        """Restart a running target with its new definition; no-op when stopped."""
        if target.id not in self._timers:
            return False
        await self.start(target)
        return True

    def destroy(self) -> None:
        """Cancel every timer and drop all run state. Safe to call repeatedly."""
        for target_id, timer in self._timers.items():
            timer.cancel()
            log.info(f"Cleared timer: {target_id}", extra={"target_id": target_id})
        self._timers.clear()
        self._states.clear()

    # Queries

    async def manual_query(self, target: MonitorTarget) -> TickOutcome:
        """Run a single tick outside the timer, with the usual bookkeeping."""
        return await self._tick(target)

    def get_status(self, target_id: str) -> Optional[MonitorRunState]:
        state = self._states.get(target_id)
        return state.model_copy() if state is not None else None

    def get_all_statuses(self) -> List[MonitorRunState]:
        return [state.model_copy() for state in self._states.values()]

    def running_ids(self) -> List[str]:
        return list(self._timers)

    def is_running(self, target_id: str) -> bool:
        return target_id in self._timers

    # Tick

    async def _tick(self, target: MonitorTarget) -> TickOutcome:
        state = self._states.get(target.id) or MonitorRunState(target_id=target.id)
        response_time_ms = 0
        try:
            response = await self._engine.execute(target.request)
            response_time_ms = response.response_time_ms
            if not response.success:
                log.error(f"[{target.name}] API error: {response.error}", extra={"target_id": target.id})
                return self._record_failure(
                    target, state, response.error or "request failed", response.error_type, response_time_ms
                )

            balance = self._parser.parse(response.data, target.strategy_id)
        except ParseError as exc:
            log.error(f"[{target.name}] Parse error: {exc}", extra={"target_id": target.id})
            return self._record_failure(target, state, str(exc), type(exc).__name__, response_time_ms)
        except Exception as exc:  # noqa: BLE001 - a tick must never raise into the timer loop
            log.exception(f"[{target.name}] Unexpected tick failure", extra={"target_id": target.id})
            return self._record_failure(target, state, str(exc), type(exc).__name__, response_time_ms)

        now = self._clock()
        state.success_count += 1
        state.last_run = now
        # stop() may have run while this tick was awaiting the engine
        if state.status == "running":
            state.next_run = now + timedelta(seconds=target.interval_seconds)

        level = classify_balance(
            balance.available_balance, target.warning_threshold, target.danger_threshold
        )
        log.success(
            f"[{target.name}] Balance: {balance.currency} {balance.available_balance:.2f} "
            f"({level}, {response_time_ms} ms)",
            extra={"target_id": target.id, "level": level},
        )
        self._emit_balance(
            BalanceUpdateEvent(
                config_id=target.id,
                success=True,
                balance=balance.available_balance,
                currency=balance.currency,
                is_available=balance.is_available,
                level=level,
                response_time_ms=response_time_ms,
                timestamp=now,
            )
        )
        return TickOutcome(
            target_id=target.id,
            success=True,
            balance=balance,
            level=level,
            response_time_ms=response_time_ms,
        )

    def _record_failure(
        self,
        target: MonitorTarget,
        state: MonitorRunState,
        error: str,
        error_type: Optional[str],
        response_time_ms: int,
    ) -> TickOutcome:
        now = self._clock()
        state.error_count += 1
        state.last_run = now
        self._emit_balance(
            BalanceUpdateEvent(
                config_id=target.id,
                success=False,
                error=error,
                response_time_ms=response_time_ms,
                timestamp=now,
            )
        )
        return TickOutcome(
            target_id=target.id,
            success=False,
            error=error,
            error_type=error_type,
            response_time_ms=response_time_ms,
        )

    # Notifications

    def _emit_status(self, state: MonitorRunState) -> None:
        try:
            self._notifier.status_change(StatusChangeEvent.from_state(state))
        except Exception:  # noqa: BLE001 - notification delivery is fire-and-forget
            log.exception("status-change notification failed", extra={"target_id": state.target_id})

    def _emit_balance(self, event: BalanceUpdateEvent) -> None:
        try:
            self._notifier.balance_update(event)
        except Exception:  # noqa: BLE001 - notification delivery is fire-and-forget
            log.exception("balance-update notification failed", extra={"target_id": event.config_id})


__all__ = ["MonitorScheduler", "validate_target"]
