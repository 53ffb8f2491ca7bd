"""
Volcano Engine strategy: a nested `Result` object in CNY.
"""

from __future__ import annotations

from typing import Any

from balance_monitor.domain.models import StandardBalance
from balance_monitor.strategies.abstract import AbstractVendorStrategy, StrategyMetadata, to_float


class VolcEngineStrategy(AbstractVendorStrategy):
    metadata = StrategyMetadata(
        id="volcengine",
        name="Volcano Engine balance parser",
        description="Result.AvailableBalance in CNY.",
    )
    aliases = frozenset({"volcano", "火山"})

    def parse(self, response: Any) -> StandardBalance:
        body = self._object(response)
        result = self._object(body.get("Result"))
        available = to_float(result.get("AvailableBalance"))

        return StandardBalance(
            currency="CNY",
            available_balance=available,
            cash_balance=to_float(result.get("CashBalance")),
            status=self.determine_status(available),
            meta={
                "original_response": response,
                "account_id": result.get("AccountID"),
                "arrears_balance": result.get("ArrearsBalance"),
                "credit_limit": result.get("CreditLimit"),
                "freeze_amount": result.get("FreezeAmount"),
                "response_metadata": body.get("ResponseMetadata"),
            },
        )


__all__ = ["VolcEngineStrategy"]
