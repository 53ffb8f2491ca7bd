"""
OpenRouter strategy: credits minus usage, in USD.
"""

from __future__ import annotations

from typing import Any

from balance_monitor.domain.models import StandardBalance
from balance_monitor.strategies.abstract import AbstractVendorStrategy, StrategyMetadata, to_float


class OpenRouterStrategy(AbstractVendorStrategy):
    metadata = StrategyMetadata(
        id="openrouter",
        name="OpenRouter balance parser",
        description="data.total_credits - data.total_usage in USD.",
    )
    aliases = frozenset({"open router"})

    def parse(self, response: Any) -> StandardBalance:
        data = self._object(self._object(response).get("data"))
        total_credits = to_float(data.get("total_credits"))
        total_usage = to_float(data.get("total_usage"))
        available = total_credits - total_usage

        return StandardBalance(
            currency="USD",
            available_balance=available,
            total_credits=total_credits,
            total_usage=total_usage,
            status=self.determine_status(available),
            meta={"original_response": response, "data": data},
        )


__all__ = ["OpenRouterStrategy"]
