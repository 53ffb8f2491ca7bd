"""
Abstract strategy interfaces for vendor balance extraction.

Each vendor strategy maps one vendor's raw JSON response to a
`StandardBalance`. Concrete strategies implement the VendorStrategy protocol
(usually by subclassing AbstractVendorStrategy) and are registered by id in a
`StrategyRegistry`. Strategies are stateless and pure given their input.
"""

from __future__ import annotations

import abc
import math
from typing import Any, ClassVar, Dict, FrozenSet, Protocol, runtime_checkable

from pydantic import BaseModel

from balance_monitor.domain.models import StandardBalance
from balance_monitor.domain.thresholds import (
    DEFAULT_DANGER_THRESHOLD,
    DEFAULT_WARNING_THRESHOLD,
    BalanceStatus,
    default_status,
)

CURRENCY_SYMBOLS: Dict[str, str] = {
    "¥": "CNY",
    "￥": "CNY",
    "$": "USD",
    "€": "EUR",
    "£": "GBP",
}


class StrategyMetadata(BaseModel):
    id: str
    name: str
    description: str = ""
    version: str = "1.0.0"

    model_config = {"frozen": True}


@runtime_checkable
class VendorStrategy(Protocol):
    """
    Common interface all vendor strategies must implement.

    Attributes
    ----------
    metadata : StrategyMetadata
        Stable id (used for registry lookup and target configuration) plus
        human-friendly name and description.
    """

    metadata: StrategyMetadata

    def parse(self, response: Any) -> StandardBalance:
        """
        Map a decoded vendor JSON response to a StandardBalance.

        Parameters
        ----------
        response : Any
            The decoded JSON body returned by the vendor API.

        Returns
        -------
        StandardBalance
            The normalized balance record.
        """
        ...

    def supports(self, vendor: str) -> bool:
        """Return True if `vendor` (already lower-cased) names this strategy."""
        ...


def to_float(value: Any) -> float:
    """
    Coerce a JSON scalar to float. Missing or non-numeric values become 0.0.
    """
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0
    return number if math.isfinite(number) else 0.0


def standardize_currency(currency: Any) -> str:
    text = str(currency).strip() if currency is not None else ""
    return CURRENCY_SYMBOLS.get(text, text)


class AbstractVendorStrategy(abc.ABC):
    """
    Optional ABC helper for class-based strategies.

    Subclasses set `metadata` and `aliases` and implement `parse`.
    """

    metadata: ClassVar[StrategyMetadata]
    aliases: ClassVar[FrozenSet[str]] = frozenset()

    @abc.abstractmethod
    def parse(self, response: Any) -> StandardBalance:  # pragma: no cover - interface only
        """Map a raw vendor response to a StandardBalance."""
        raise NotImplementedError

    def supports(self, vendor: str) -> bool:
        normalized = vendor.strip().lower()
        return normalized == self.metadata.id or normalized in self.aliases

    @staticmethod
    def _object(value: Any) -> Dict[str, Any]:
        """Return `value` if it is a JSON object, else an empty one."""
        return value if isinstance(value, dict) else {}

    @staticmethod
    def determine_status(
        balance: float,
        warning_threshold: float = DEFAULT_WARNING_THRESHOLD,
        danger_threshold: float = DEFAULT_DANGER_THRESHOLD,
    ) -> BalanceStatus:
        return default_status(balance, warning_threshold, danger_threshold)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.metadata.id!r})"


__all__ = [
    "AbstractVendorStrategy",
    "CURRENCY_SYMBOLS",
    "StrategyMetadata",
    "VendorStrategy",
    "standardize_currency",
    "to_float",
]
