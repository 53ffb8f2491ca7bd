"""
Moonshot strategy: a nested `data` object with a fixed CNY currency.

An explicit failure flag at the top level (`status: false`, or a non-zero
`code`) zeroes every balance and reports `inactive`.
"""

from __future__ import annotations

from typing import Any

from balance_monitor.domain.models import StandardBalance
from balance_monitor.strategies.abstract import AbstractVendorStrategy, StrategyMetadata, to_float


def _is_failure(body: dict) -> bool:
    if body.get("status") is False:
        return True
    code = body.get("code")
    return code is not None and code not in (0, "0")


class MoonshotStrategy(AbstractVendorStrategy):
    metadata = StrategyMetadata(
        id="moonshot",
        name="Moonshot balance parser",
        description="data.available_balance in CNY; cash and voucher balances reported.",
    )
    aliases = frozenset({"月之暗面", "kimi"})

    def parse(self, response: Any) -> StandardBalance:
        body = self._object(response)
        meta = {
            "original_response": response,
            "code": body.get("code"),
            "scode": body.get("scode"),
            "status": body.get("status"),
        }

        if _is_failure(body):
            meta["message"] = body.get("message")
            return StandardBalance(
                currency="CNY",
                available_balance=0.0,
                cash_balance=0.0,
                voucher_balance=0.0,
                status="inactive",
                meta=meta,
            )

        data = self._object(body.get("data"))
        available = to_float(data.get("available_balance"))
        meta["data"] = data
        return StandardBalance(
            currency="CNY",
            available_balance=available,
            cash_balance=to_float(data.get("cash_balance")),
            voucher_balance=to_float(data.get("voucher_balance")),
            status=self.determine_status(available),
            meta=meta,
        )


__all__ = ["MoonshotStrategy"]
