"""
PPIO strategy: a single top-level `credit_balance` scalar in CNY.
"""

from __future__ import annotations

from typing import Any

from balance_monitor.domain.models import StandardBalance
from balance_monitor.strategies.abstract import AbstractVendorStrategy, StrategyMetadata, to_float


class PPIOStrategy(AbstractVendorStrategy):
    metadata = StrategyMetadata(
        id="ppio",
        name="PPIO balance parser",
        description="Top-level credit_balance in CNY.",
    )

    def parse(self, response: Any) -> StandardBalance:
        credit_balance = to_float(self._object(response).get("credit_balance"))
        return StandardBalance(
            currency="CNY",
            available_balance=credit_balance,
            status=self.determine_status(credit_balance),
            meta={"original_response": response, "credit_balance": credit_balance},
        )


__all__ = ["PPIOStrategy"]
