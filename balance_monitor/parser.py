"""
Balance parser facade: dispatch a raw response to the selected strategy.

Usage:
    from balance_monitor.parser import BalanceParser
    from balance_monitor.strategies import build_default_registry

    parser = BalanceParser(build_default_registry())
    balance = parser.parse(response_json, "deepseek")
"""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel

from balance_monitor.domain.errors import (
    EmptyResponse,
    ParseError,
    StrategyParseError,
    UnknownStrategy,
)
from balance_monitor.domain.models import StandardBalance
from balance_monitor.strategies.registry import StrategyRegistry
from balance_monitor.utils.logging import get_logger

log = get_logger(__name__)


class ParseAttempt(BaseModel):
    success: bool
    result: Optional[StandardBalance] = None
    error: Optional[str] = None


class BalanceParser:
    def __init__(self, registry: StrategyRegistry) -> None:
        self.registry = registry

    def parse(self, raw_response: Any, strategy_id: str) -> StandardBalance:
        """
        Parse `raw_response` with the strategy registered as `strategy_id`.

        Raises
        ------
        EmptyResponse
            If `raw_response` is None (checked before dispatch).
        UnknownStrategy
            If no registered strategy matches `strategy_id`.
        StrategyParseError
            If the strategy itself raises; the original error is the `__cause__`.
        """
        if raw_response is None:
            raise EmptyResponse("API response is empty")

        strategy = self.registry.find(strategy_id)
        if strategy is None:
            raise UnknownStrategy(strategy_id, self.registry.list_ids())

        log.debug(
            f"[Parser] Using strategy {strategy.metadata.id} for '{strategy_id}'",
            extra={"strategy": strategy.metadata.id},
        )
        try:
            return strategy.parse(raw_response)
        except Exception as exc:  # noqa: BLE001 - any strategy failure is wrapped
            log.error(
                f"[Parser] {strategy.metadata.name} failed: {exc}",
                extra={"strategy": strategy.metadata.id},
            )
            raise StrategyParseError(strategy.metadata.id, exc) from exc

    def try_parse(self, raw_response: Any, strategy_id: str) -> ParseAttempt:
        """Parse without raising; used by ad-hoc "test parse" flows."""
        try:
            return ParseAttempt(success=True, result=self.parse(raw_response, strategy_id))
        except ParseError as exc:
            return ParseAttempt(success=False, error=str(exc))

    def strategy_ids(self) -> List[str]:
        return self.registry.list_ids()


__all__ = ["BalanceParser", "ParseAttempt"]
