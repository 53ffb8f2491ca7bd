from __future__ import annotations

import asyncio
from datetime import timedelta

import httpx
import pytest

from balance_monitor.domain.errors import InvalidTarget
from balance_monitor.domain.models import RequestDescriptor, StandardBalance
from balance_monitor.domain.thresholds import classify_balance
from balance_monitor.infrastructure.target_store import InMemoryTargetStore
from balance_monitor.parser import BalanceParser
from balance_monitor.scheduler import MonitorScheduler, validate_target


def _json_handler(payload: dict):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=payload)

    return handler


def _timeout_handler(request: httpx.Request) -> httpx.Response:
    raise httpx.ReadTimeout("timed out", request=request)


@pytest.fixture
def build_scheduler(parser, notifier, timer_factory, fixed_now, test_settings):
    def _build(handler, targets=None) -> MonitorScheduler:
        from balance_monitor.infrastructure.http_engine import RequestEngine

        engine = RequestEngine(transport=httpx.MockTransport(handler), settings=test_settings)
        return MonitorScheduler(
            engine,
            parser,
            notifier=notifier,
            targets=targets,
            timer_factory=timer_factory,
            clock=lambda: fixed_now,
            settings=test_settings,
        )

    return _build


class TestClassification:
    @pytest.mark.parametrize(
        ("balance", "expected"),
        [(-5, "danger"), (0, "danger"), (10, "danger"), (10.01, "warning"), (50, "warning"), (50.01, "normal"), (float("inf"), "normal")],
    )
    def test_boundaries(self, balance: float, expected: str) -> None:
        assert classify_balance(balance, warning=50, danger=10) == expected

    @pytest.mark.parametrize("balance", [-100.0, 0.0, 9.99, 10.0, 25.0, 50.0, 1e9])
    def test_exactly_one_level_and_idempotent(self, balance: float) -> None:
        first = classify_balance(balance, warning=50, danger=10)
        assert first in {"danger", "warning", "normal"}
        assert classify_balance(balance, warning=50, danger=10) == first


class TestValidation:
    def test_valid_target_has_no_violations(self, make_target) -> None:
        assert validate_target(make_target()) == []

    def test_collects_every_violation(self, make_target) -> None:
        target = make_target(
            name=" ",
            url="ftp://nope",
            strategy_id="",
            interval_seconds=2,
            warning_threshold=10,
            danger_threshold=10,
        )
        violations = validate_target(target)
        assert len(violations) == 5


@pytest.mark.asyncio
async def test_end_to_end_deepseek_warning(build_scheduler, make_target, notifier, timer_factory, deepseek_response, fixed_now) -> None:
    scheduler = build_scheduler(_json_handler(deepseek_response))
    target = make_target()

    result = await scheduler.start(target)

    assert result.success is True
    state = scheduler.get_status(target.id)
    assert state.status == "running"
    assert state.success_count == 1
    assert state.error_count == 0
    assert state.last_run == fixed_now
    assert state.next_run == fixed_now + timedelta(seconds=30)

    [event] = notifier.balance_events
    assert event.success is True
    assert event.balance == pytest.approx(44.35)
    assert event.currency == "CNY"
    assert event.is_available is True
    assert event.level == "warning"
    payload = event.to_payload()
    assert payload["configId"] == target.id
    assert payload["isAvailable"] is True

    [timer] = timer_factory.active_for(target.id)
    assert timer.interval_seconds == 30


@pytest.mark.asyncio
async def test_manual_query_returns_standard_balance(build_scheduler, make_target, deepseek_response) -> None:
    scheduler = build_scheduler(_json_handler(deepseek_response))

    outcome = await scheduler.manual_query(make_target())

    assert outcome.success is True
    assert isinstance(outcome.balance, StandardBalance)
    assert outcome.balance.currency == "CNY"
    assert outcome.balance.available_balance == pytest.approx(44.35)
    assert outcome.balance.status == "warning"
    assert scheduler.running_ids() == []


@pytest.mark.asyncio
async def test_failed_tick_counts_error_and_keeps_running(build_scheduler, make_target, notifier, timer_factory) -> None:
    scheduler = build_scheduler(_timeout_handler)
    target = make_target()

    await scheduler.start(target)
    state = scheduler.get_status(target.id)
    assert state.error_count == 1
    assert state.success_count == 0
    assert state.status == "running"

    [timer] = timer_factory.active_for(target.id)
    await timer.fire()

    state = scheduler.get_status(target.id)
    assert state.error_count == 2
    assert state.success_count == 0
    assert state.status == "running"
    assert scheduler.is_running(target.id)

    failures = [e for e in notifier.balance_events if not e.success]
    assert len(failures) == 2
    assert "timed out" in failures[0].error
    assert failures[0].response_time_ms >= 0


@pytest.mark.asyncio
async def test_parse_failure_uses_failure_path(build_scheduler, make_target, notifier) -> None:
    scheduler = build_scheduler(_json_handler({"credit_balance": 1}))
    target = make_target(strategy_id="no-such-vendor")

    outcome = await scheduler.manual_query(target)

    assert outcome.success is False
    assert outcome.error_type == "UnknownStrategy"
    assert notifier.balance_events[-1].success is False


@pytest.mark.asyncio
async def test_ticks_follow_target_thresholds(build_scheduler, make_target, timer_factory, notifier) -> None:
    scheduler = build_scheduler(_json_handler({"credit_balance": "8"}))
    target = make_target(strategy_id="ppio", warning_threshold=100, danger_threshold=20)

    await scheduler.start(target)
    [timer] = timer_factory.active_for(target.id)
    outcome = await timer.fire()

    assert outcome.level == "danger"
    assert scheduler.get_status(target.id).success_count == 2
    assert [e.level for e in notifier.balance_events] == ["danger", "danger"]


@pytest.mark.asyncio
async def test_starting_twice_keeps_exactly_one_timer(build_scheduler, make_target, timer_factory, deepseek_response) -> None:
    scheduler = build_scheduler(_json_handler(deepseek_response))
    target = make_target()

    await scheduler.start(target)
    await scheduler.start(target)

    assert len(timer_factory.timers) == 2
    assert len(timer_factory.active_for(target.id)) == 1
    assert timer_factory.timers[0].cancelled is True
    assert scheduler.running_ids() == [target.id]
    # counters reset on restart; one immediate tick since
    assert scheduler.get_status(target.id).success_count == 1


@pytest.mark.asyncio
async def test_cancelled_timer_does_not_tick(build_scheduler, make_target, timer_factory, notifier, deepseek_response) -> None:
    scheduler = build_scheduler(_json_handler(deepseek_response))
    target = make_target()
    await scheduler.start(target)
    old_timer = timer_factory.timers[0]

    scheduler.stop(target)
    assert await old_timer.fire() is None
    assert len(notifier.balance_events) == 1


@pytest.mark.asyncio
async def test_invalid_target_raises_and_arms_nothing(build_scheduler, make_target, timer_factory) -> None:
    scheduler = build_scheduler(_json_handler({}))
    target = make_target(interval_seconds=1, warning_threshold=5, danger_threshold=10)

    with pytest.raises(InvalidTarget) as excinfo:
        await scheduler.start(target)

    assert len(excinfo.value.violations) == 2
    assert timer_factory.timers == []
    assert scheduler.get_status(target.id) is None


@pytest.mark.asyncio
async def test_stop_and_stop_unknown(build_scheduler, make_target, notifier, deepseek_response) -> None:
    scheduler = build_scheduler(_json_handler(deepseek_response))
    target = make_target()

    assert scheduler.stop("never-started") is False

    await scheduler.start(target)
    assert scheduler.stop(target.id) is True
    assert scheduler.stop(target.id) is False

    state = scheduler.get_status(target.id)
    assert state.status == "stopped"
    assert [e.status for e in notifier.status_events] == ["running", "stopped"]


@pytest.mark.asyncio
async def test_start_all_counts_started_and_failed(build_scheduler, make_target, deepseek_response) -> None:
    store = InMemoryTargetStore(
        [
            make_target(id="a"),
            make_target(id="b", interval_seconds=1),
            make_target(id="c", enabled=False),
        ]
    )
    scheduler = build_scheduler(_json_handler(deepseek_response), targets=store)

    result = await scheduler.start_all()

    assert result.success is True
    assert result.started == 1
    assert result.failed == 1
    assert scheduler.running_ids() == ["a"]

    stopped = scheduler.stop_all()
    assert stopped.stopped == 1
    assert scheduler.running_ids() == []


@pytest.mark.asyncio
async def test_start_all_without_enabled_targets(build_scheduler, make_target) -> None:
    scheduler = build_scheduler(_json_handler({}))
    result = await scheduler.start_all([make_target(enabled=False)])
    assert result.success is False
    assert result.started == 0


@pytest.mark.asyncio
async def test_start_by_id(build_scheduler, make_target, deepseek_response) -> None:
    store = InMemoryTargetStore([make_target(id="a"), make_target(id="bad", interval_seconds=0)])
    scheduler = build_scheduler(_json_handler(deepseek_response), targets=store)

    assert (await scheduler.start_by_id("a")).success is True
    assert (await scheduler.start_by_id("missing")).success is False
    bad = await scheduler.start_by_id("bad")
    assert bad.success is False
    assert "interval" in bad.message


@pytest.mark.asyncio
async def test_reload_only_restarts_running_targets(build_scheduler, make_target, timer_factory, deepseek_response) -> None:
    scheduler = build_scheduler(_json_handler(deepseek_response))
    target = make_target()

    assert await scheduler.reload(target) is False
    await scheduler.start(target)
    assert await scheduler.reload(make_target(interval_seconds=60)) is True
    [timer] = timer_factory.active_for(target.id)
    assert timer.interval_seconds == 60


@pytest.mark.asyncio
async def test_destroy_clears_everything(build_scheduler, make_target, timer_factory, deepseek_response) -> None:
    scheduler = build_scheduler(_json_handler(deepseek_response))
    scheduler.destroy()

    await scheduler.start(make_target(id="a"))
    await scheduler.start(make_target(id="b"))
    scheduler.destroy()

    assert all(timer.cancelled for timer in timer_factory.timers)
    assert scheduler.get_all_statuses() == []
    assert scheduler.running_ids() == []
    scheduler.destroy()


@pytest.mark.asyncio
async def test_notifier_failures_do_not_break_ticks(parser, make_target, timer_factory, test_settings, deepseek_response) -> None:
    from balance_monitor.infrastructure.http_engine import RequestEngine
    from balance_monitor.notifications import CallbackNotifier

    def explode(event) -> None:
        raise RuntimeError("ui gone")

    engine = RequestEngine(transport=httpx.MockTransport(_json_handler(deepseek_response)), settings=test_settings)
    scheduler = MonitorScheduler(
        engine,
        parser,
        notifier=CallbackNotifier(on_status_change=explode, on_balance_update=explode),
        timer_factory=timer_factory,
        settings=test_settings,
    )

    result = await scheduler.start(make_target())

    assert result.success is True
    assert scheduler.get_status("deepseek-main").success_count == 1


@pytest.mark.asyncio
async def test_unexpected_tick_exception_is_counted(make_target, timer_factory, test_settings, notifier) -> None:
    class _BrokenParser(BalanceParser):
        def parse(self, raw_response, strategy_id):
            raise RuntimeError("boom")

    engine_handler = _json_handler({"credit_balance": 1})
    from balance_monitor.infrastructure.http_engine import RequestEngine
    from balance_monitor.strategies import build_default_registry

    scheduler = MonitorScheduler(
        RequestEngine(transport=httpx.MockTransport(engine_handler), settings=test_settings),
        _BrokenParser(build_default_registry()),
        notifier=notifier,
        timer_factory=timer_factory,
        settings=test_settings,
    )

    await scheduler.start(make_target())

    state = scheduler.get_status("deepseek-main")
    assert state.error_count == 1
    assert state.status == "running"
    assert notifier.balance_events[-1].error == "boom"


@pytest.mark.asyncio
async def test_async_context_manager_destroys(build_scheduler, make_target, timer_factory, deepseek_response) -> None:
    async with build_scheduler(_json_handler(deepseek_response)) as scheduler:
        await scheduler.start(make_target())
    assert timer_factory.timers[0].cancelled is True


def test_unknown_target_has_no_status(build_scheduler) -> None:
    scheduler = build_scheduler(_json_handler({}))
    assert scheduler.get_status("unknown") is None
    assert scheduler.get_all_statuses() == []


@pytest.mark.asyncio
async def test_status_is_a_detached_copy(build_scheduler, make_target, deepseek_response) -> None:
    scheduler = build_scheduler(_json_handler(deepseek_response))
    await scheduler.start(make_target())

    snapshot = scheduler.get_status("deepseek-main")
    snapshot.success_count = 99

    assert scheduler.get_status("deepseek-main").success_count == 1


@pytest.mark.asyncio
async def test_status_change_payload_is_camel_cased(build_scheduler, make_target, notifier, fixed_now, deepseek_response) -> None:
    scheduler = build_scheduler(_json_handler(deepseek_response))
    await scheduler.start(make_target())

    payload = notifier.status_events[0].to_payload()

    assert payload["configId"] == "deepseek-main"
    assert payload["status"] == "running"
    assert payload["nextRun"] == (fixed_now + timedelta(seconds=30)).isoformat().replace("+00:00", "Z")
    assert payload["errorCount"] == 0
    assert payload["successCount"] == 0


def test_request_descriptor_method_is_normalized() -> None:
    assert RequestDescriptor(url="https://x.test", method="get").method == "GET"


@pytest.mark.asyncio
async def test_stop_during_tick_keeps_next_run_cleared(build_scheduler, make_target, timer_factory, deepseek_response) -> None:
    gate = asyncio.Event()
    gate.set()
    entered = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        entered.set()
        await gate.wait()
        return httpx.Response(200, json=deepseek_response)

    scheduler = build_scheduler(handler)
    target = make_target()
    await scheduler.start(target)
    [timer] = timer_factory.active_for(target.id)

    gate.clear()
    entered.clear()
    in_flight = asyncio.create_task(timer.fire())
    await asyncio.wait_for(entered.wait(), timeout=1.0)
    scheduler.stop(target)
    gate.set()
    await in_flight

    state = scheduler.get_status(target.id)
    assert state.status == "stopped"
    assert state.next_run is None
    assert state.success_count == 2
