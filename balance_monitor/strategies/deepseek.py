"""
DeepSeek strategy: a single nested balance object.

Response shape::

    {"is_available": true,
     "balance_infos": [{"currency": "CNY", "total_balance": "44.35",
                        "granted_balance": "0.00", "topped_up_balance": "44.35"}]}

Only the first element of `balance_infos` is read. An explicit
`is_available: false` forces `inactive` whatever the numeric balance.
"""

from __future__ import annotations

from typing import Any

from balance_monitor.domain.models import StandardBalance
from balance_monitor.strategies.abstract import (
    AbstractVendorStrategy,
    StrategyMetadata,
    standardize_currency,
    to_float,
)


class DeepSeekStrategy(AbstractVendorStrategy):
    metadata = StrategyMetadata(
        id="deepseek",
        name="DeepSeek balance parser",
        description="First entry of balance_infos; total_balance is the available balance.",
    )
    aliases = frozenset({"深度求索"})

    def parse(self, response: Any) -> StandardBalance:
        body = self._object(response)
        infos = body.get("balance_infos")
        info = self._object(infos[0]) if isinstance(infos, list) and infos else {}

        total_balance = to_float(info.get("total_balance"))
        status = self.determine_status(total_balance)
        if body.get("is_available") is False:
            status = "inactive"

        return StandardBalance(
            currency=standardize_currency(info.get("currency") or "CNY"),
            available_balance=total_balance,
            total_balance=total_balance,
            granted_balance=to_float(info.get("granted_balance")),
            topped_up_balance=to_float(info.get("topped_up_balance")),
            status=status,
            meta={
                "original_response": response,
                "is_available": body.get("is_available"),
                "balance_info": info,
            },
        )


__all__ = ["DeepSeekStrategy"]
