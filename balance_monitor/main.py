from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional

import typer

from balance_monitor.config import get_settings
from balance_monitor.domain.models import BalanceUpdateEvent, MonitorRunState, TickOutcome
from balance_monitor.infrastructure.http_engine import RequestEngine
from balance_monitor.infrastructure.target_store import TargetsFile, load_targets_file
from balance_monitor.notifications import CallbackNotifier
from balance_monitor.parser import BalanceParser
from balance_monitor.reporter import format_amount, print_balance, print_outcomes, print_run_states
from balance_monitor.scheduler import MonitorScheduler
from balance_monitor.strategies.registry import StrategyRegistry, build_default_registry
from balance_monitor.utils.logging import configure_logging

app = typer.Typer(help="Balance Monitor CLI.")

FileOption = typer.Option(
    None,
    "--file",
    "-f",
    help="Targets JSON file (default from TARGETS_FILE).",
)


def _setup() -> None:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)


def _load(file: Optional[Path]) -> tuple[TargetsFile, StrategyRegistry]:
    path = file or Path(get_settings().targets_file)
    if not path.exists():
        typer.echo(f"Targets file not found: {path}", err=True)
        raise typer.Exit(code=2)
    targets = load_targets_file(path)
    registry = build_default_registry()
    targets.register_mappings(registry)
    return targets, registry


def _echo_update(event: BalanceUpdateEvent) -> None:
    if event.success:
        typer.echo(
            f"[{event.config_id}] {event.currency} {format_amount(event.balance)} "
            f"({event.level}, {event.response_time_ms} ms)"
        )
    else:
        typer.echo(f"[{event.config_id}] FAILED: {event.error} ({event.response_time_ms} ms)", err=True)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"env={settings.app_env} log={settings.log_level} | "
        f"timeout={settings.http_default_timeout_ms}ms retries={settings.http_connect_retries} | "
        f"min_interval={settings.monitor_min_interval_seconds}s targets={settings.targets_file}"
    )


@app.command()
def strategies() -> None:
    """
    List registered balance strategies.
    """
    for meta in build_default_registry().metadata():
        typer.echo(f"{meta.id:<12} {meta.name} - {meta.description}")


@app.command()
def parse(
    response_file: Path = typer.Argument(..., help="JSON file holding a raw vendor response."),
    strategy: str = typer.Option(..., "--strategy", "-s", help="Strategy id, e.g. deepseek."),
) -> None:
    """
    Parse a saved vendor response with a strategy and print the balance.
    """
    _setup()
    raw = json.loads(response_file.read_text(encoding="utf-8"))
    attempt = BalanceParser(build_default_registry()).try_parse(raw, strategy)
    if not attempt.success or attempt.result is None:
        typer.echo(attempt.error, err=True)
        raise typer.Exit(code=1)
    print_balance(attempt.result, title=f"Balance ({strategy})")


async def _query(targets: TargetsFile, registry: StrategyRegistry, target_id: str) -> Optional[TickOutcome]:
    target = next((t for t in targets.targets if t.id == target_id), None)
    if target is None:
        return None
    async with RequestEngine() as engine:
        scheduler = MonitorScheduler(engine, BalanceParser(registry), targets=targets.to_store())
        return await scheduler.manual_query(target)


@app.command()
def query(
    target_id: str = typer.Argument(..., help="Target id to query once."),
    file: Optional[Path] = FileOption,
) -> None:
    """
    Run a single fetch-parse-classify cycle for one target.
    """
    _setup()
    targets, registry = _load(file)
    outcome = asyncio.run(_query(targets, registry, target_id))
    if outcome is None:
        typer.echo(f"Target not found: {target_id}", err=True)
        raise typer.Exit(code=2)
    print_outcomes([outcome])
    if outcome.balance is not None:
        print_balance(outcome.balance, title=f"Balance ({target_id})")
    if not outcome.success:
        raise typer.Exit(code=1)


async def _run(
    targets: TargetsFile,
    registry: StrategyRegistry,
    duration: Optional[float],
) -> List[MonitorRunState]:
    notifier = CallbackNotifier(on_balance_update=_echo_update)
    async with RequestEngine() as engine:
        async with MonitorScheduler(
            engine, BalanceParser(registry), notifier=notifier, targets=targets.to_store()
        ) as scheduler:
            result = await scheduler.start_all()
            typer.echo(result.message)
            if not result.success:
                return []
            if duration:
                await asyncio.sleep(duration)
            else:
                await asyncio.Event().wait()
            return scheduler.get_all_statuses()


@app.command()
def run(
    file: Optional[Path] = FileOption,
    duration: Optional[float] = typer.Option(
        None,
        "--duration",
        "-d",
        help="Stop after this many seconds (default: run until Ctrl+C).",
    ),
) -> None:
    """
    Start every enabled target and poll until interrupted.
    """
    _setup()
    targets, registry = _load(file)
    states = asyncio.run(_run(targets, registry, duration))
    print_run_states(states)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
