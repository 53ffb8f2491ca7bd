"""
AIHubMix strategy: a single scalar usage counter in USD.

`total_usage` is reported as the available quota. A negative value means the
key is unlimited (available balance becomes +inf and status `active`); zero
means the quota is exhausted (`inactive`).
"""

from __future__ import annotations

import math
from typing import Any

from balance_monitor.domain.models import StandardBalance
from balance_monitor.domain.thresholds import BalanceStatus
from balance_monitor.strategies.abstract import AbstractVendorStrategy, StrategyMetadata, to_float


class AIHubMixStrategy(AbstractVendorStrategy):
    metadata = StrategyMetadata(
        id="aihubmix",
        name="AIHubMix balance parser",
        description="Top-level total_usage in USD; negative usage means unlimited.",
    )
    aliases = frozenset({"ai hub mix"})

    def parse(self, response: Any) -> StandardBalance:
        body = self._object(response)
        total_usage = to_float(body.get("total_usage"))
        unlimited = total_usage < 0

        available = math.inf if unlimited else total_usage
        status: BalanceStatus
        if unlimited:
            status = "active"
        elif total_usage == 0:
            status = "inactive"
        else:
            status = self.determine_status(total_usage)

        return StandardBalance(
            currency="USD",
            available_balance=available,
            total_usage=total_usage,
            status=status,
            meta={
                "original_response": response,
                "object": body.get("object"),
                "is_unlimited": unlimited,
            },
        )


__all__ = ["AIHubMixStrategy"]
