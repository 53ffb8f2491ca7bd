"""
Balance classification rules.

Two classifications exist:

- `default_status` is what a strategy reports on its own (`StandardBalance.status`),
  using fixed defaults when no thresholds are supplied.
- `classify_balance` is the scheduler's alert level for a target, using the
  target's own warning/danger thresholds. Boundaries are inclusive: a balance
  equal to the danger threshold is `danger`, equal to warning is `warning`.
"""

from __future__ import annotations

from typing import Literal

BalanceStatus = Literal["active", "inactive", "warning", "danger"]
AlertLevel = Literal["normal", "warning", "danger"]

DEFAULT_WARNING_THRESHOLD = 50.0
DEFAULT_DANGER_THRESHOLD = 10.0


def default_status(
    balance: float,
    warning_threshold: float = DEFAULT_WARNING_THRESHOLD,
    danger_threshold: float = DEFAULT_DANGER_THRESHOLD,
) -> BalanceStatus:
    if balance <= 0:
        return "inactive"
    if balance <= danger_threshold:
        return "danger"
    if balance <= warning_threshold:
        return "warning"
    return "active"


def classify_balance(balance: float, warning: float, danger: float) -> AlertLevel:
    if balance <= danger:
        return "danger"
    if balance <= warning:
        return "warning"
    return "normal"


__all__ = [
    "AlertLevel",
    "BalanceStatus",
    "DEFAULT_DANGER_THRESHOLD",
    "DEFAULT_WARNING_THRESHOLD",
    "classify_balance",
    "default_status",
]
