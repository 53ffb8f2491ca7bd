from __future__ import annotations

import math
from datetime import datetime
from typing import Iterable, Mapping, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from balance_monitor.domain.models import MonitorRunState, StandardBalance, TickOutcome

_LEVEL_STYLES = {"normal": "green", "warning": "yellow", "danger": "bold red"}
_STATUS_STYLES = {
    "active": "green",
    "warning": "yellow",
    "danger": "bold red",
    "inactive": "dim",
    "running": "green",
    "stopped": "dim",
    "error": "bold red",
}


def format_amount(value: Optional[float]) -> str:
    if value is None:
        return "-"
    if math.isinf(value):
        return "unlimited"
    return f"{value:,.2f}"


def _format_ts(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S") if value else "-"


def _styled(text: str, styles: Mapping[str, str]) -> str:
    style = styles.get(text)
    return f"[{style}]{text}[/{style}]" if style else text


def print_balance(
    balance: StandardBalance,
    title: str = "Balance",
    console: Optional[Console] = None,
) -> None:
    """
    Render every populated field of a StandardBalance as a two-column table.
    """
    console = console or Console()
    table = Table(title=title, box=box.ROUNDED, show_header=False)
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", justify="right")

    table.add_row("Currency", balance.currency)
    table.add_row("Available", format_amount(balance.available_balance))
    for label, value in (
        ("Total", balance.total_balance),
        ("Granted", balance.granted_balance),
        ("Topped up", balance.topped_up_balance),
        ("Cash", balance.cash_balance),
        ("Voucher", balance.voucher_balance),
        ("Total credits", balance.total_credits),
        ("Total usage", balance.total_usage),
    ):
        if value is not None:
            table.add_row(label, format_amount(value))
    table.add_row("Status", _styled(balance.status, _STATUS_STYLES))
    table.add_row("Updated", _format_ts(balance.last_updated))

    console.print(table)


def print_outcomes(outcomes: Iterable[TickOutcome], console: Optional[Console] = None) -> None:
    """
    Render tick outcomes, one row per target.
    """
    console = console or Console()
    outcomes = list(outcomes)
    if not outcomes:
        console.print("[yellow]No results to display.[/yellow]")
        return

    table = Table(title="Balance Query Results", box=box.ROUNDED)
    table.add_column("Target", style="cyan", no_wrap=True)
    table.add_column("Balance", justify="right", style="magenta")
    table.add_column("Currency", justify="center")
    table.add_column("Level", justify="center")
    table.add_column("Response (ms)", justify="right", style="blue")
    table.add_column("Error", style="red")

    for outcome in outcomes:
        balance = outcome.balance
        table.add_row(
            outcome.target_id,
            format_amount(balance.available_balance) if balance else "-",
            balance.currency if balance else "-",
            _styled(outcome.level, _LEVEL_STYLES) if outcome.level else "-",
            str(outcome.response_time_ms),
            outcome.error or "",
        )

    console.print(table)


def print_run_states(states: Iterable[MonitorRunState], console: Optional[Console] = None) -> None:
    """
    Render scheduler run states, sorted by error count (descending) so failing
    targets show first.
    """
    console = console or Console()
    states = sorted(states, key=lambda s: (-s.error_count, s.target_id))
    if not states:
        console.print("[yellow]No monitors have run.[/yellow]")
        return

    table = Table(title="Monitor Status", box=box.ROUNDED)
    table.add_column("Target", style="cyan", no_wrap=True)
    table.add_column("Status", justify="center")
    table.add_column("Last run", justify="right")
    table.add_column("Next run", justify="right")
    table.add_column("OK", justify="right", style="green")
    table.add_column("Errors", justify="right", style="red")

    for state in states:
        table.add_row(
            state.target_id,
            _styled(state.status, _STATUS_STYLES),
            _format_ts(state.last_run),
            _format_ts(state.next_run),
            str(state.success_count),
            str(state.error_count),
        )

    console.print(table)


__all__ = ["format_amount", "print_balance", "print_outcomes", "print_run_states"]
