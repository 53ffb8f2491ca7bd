"""
Declarative path-mapping strategy for vendors without a built-in parser.

Instead of user-supplied code, a mapping names where each field lives in the
response using json_path expressions::

    PathMappingStrategy(
        "acme",
        balance_path="account.wallets[0].amount",
        currency_path="account.wallets[0].unit",
        is_available_path="account.enabled",
    )

`balance_path` is mandatory and strict: if it cannot be resolved the parse
fails. Every other path is optional.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from balance_monitor.domain.errors import PathError
from balance_monitor.domain.models import StandardBalance
from balance_monitor.strategies.abstract import (
    AbstractVendorStrategy,
    StrategyMetadata,
    standardize_currency,
    to_float,
)
from balance_monitor.utils.json_path import NOT_FOUND, resolve, resolve_optional

_NON_NUMERIC = re.compile(r"[^\d.\-]")


def _clean_number(value: Any) -> float:
    """Like to_float, but tolerates currency symbols and thousands separators."""
    if isinstance(value, str):
        value = _NON_NUMERIC.sub("", value)
    return to_float(value)


class PathMappingStrategy(AbstractVendorStrategy):
    def __init__(
        self,
        strategy_id: str,
        balance_path: str,
        currency_path: Optional[str] = None,
        currency: Optional[str] = None,
        granted_path: Optional[str] = None,
        topped_up_path: Optional[str] = None,
        is_available_path: Optional[str] = None,
        name: Optional[str] = None,
    ) -> None:
        if not balance_path or not balance_path.strip():
            raise ValueError("balance_path is required")
        self.metadata = StrategyMetadata(  # type: ignore[misc]
            id=strategy_id.strip().lower(),
            name=name or f"Path mapping ({strategy_id})",
            description=f"available balance at '{balance_path}'",
        )
        self.balance_path = balance_path
        self.currency_path = currency_path
        self.currency = currency
        self.granted_path = granted_path
        self.topped_up_path = topped_up_path
        self.is_available_path = is_available_path

    def parse(self, response: Any) -> StandardBalance:
        raw_balance = resolve(response, self.balance_path)
        if raw_balance is NOT_FOUND:
            raise PathError("field not found", self.balance_path)
        available = _clean_number(raw_balance)

        currency = resolve_optional(response, self.currency_path)
        if currency in (None, ""):
            currency = self.currency or "CNY"

        status = self.determine_status(available)
        if resolve_optional(response, self.is_available_path) is False:
            status = "inactive"

        granted = resolve_optional(response, self.granted_path)
        topped_up = resolve_optional(response, self.topped_up_path)

        return StandardBalance(
            currency=standardize_currency(currency),
            available_balance=available,
            granted_balance=_clean_number(granted) if granted is not None else None,
            topped_up_balance=_clean_number(topped_up) if topped_up is not None else None,
            status=status,
            meta={"original_response": response, "balance_path": self.balance_path},
        )


__all__ = ["PathMappingStrategy"]
