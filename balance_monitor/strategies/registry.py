"""
Strategy registry keyed by stable lowercase ids.

The registry is an explicit object: build it once at process start (usually
with `build_default_registry()`) and pass it to the parser facade. Lookup
order for `find`:

1. exact match on the normalized (stripped, lower-cased) id;
2. a strategy whose `supports()` accepts the query (exact aliases);
3. substring containment between the query and a registered id, in
   registration order.

An exact id always wins over aliases and fuzzy matches.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from balance_monitor.strategies.abstract import StrategyMetadata, VendorStrategy
from balance_monitor.strategies.aihubmix import AIHubMixStrategy
from balance_monitor.strategies.deepseek import DeepSeekStrategy
from balance_monitor.strategies.moonshot import MoonshotStrategy
from balance_monitor.strategies.openrouter import OpenRouterStrategy
from balance_monitor.strategies.ppio import PPIOStrategy
from balance_monitor.strategies.volcengine import VolcEngineStrategy
from balance_monitor.utils.logging import get_logger

log = get_logger(__name__)


def _normalize(strategy_id: str) -> str:
    return strategy_id.strip().lower()


class StrategyRegistry:
    def __init__(self, strategies: Iterable[VendorStrategy] = (), fuzzy: bool = True) -> None:
        self._strategies: Dict[str, VendorStrategy] = {}
        self.fuzzy = fuzzy
        for strategy in strategies:
            self.register(strategy.metadata.id, strategy)

    def register(self, strategy_id: str, strategy: VendorStrategy) -> None:
        key = _normalize(strategy_id)
        if not key:
            raise ValueError("strategy id must be a non-empty string")
        if key in self._strategies:
            log.warning(f"Strategy '{key}' already registered; overwriting", extra={"strategy": key})
        self._strategies[key] = strategy
        log.debug(f"Registered strategy {strategy.metadata.name} ({key})", extra={"strategy": key})

    def unregister(self, strategy_id: str) -> bool:
        return self._strategies.pop(_normalize(strategy_id), None) is not None

    def find(self, strategy_id: str) -> Optional[VendorStrategy]:
        query = _normalize(strategy_id or "")
        if not query:
            return None

        exact = self._strategies.get(query)
        if exact is not None:
            return exact

        for strategy in self._strategies.values():
            if strategy.supports(query):
                return strategy

        if self.fuzzy:
            for key, strategy in self._strategies.items():
                if key in query or query in key:
                    return strategy

        return None

    def list_ids(self) -> List[str]:
        return list(self._strategies)

    def metadata(self) -> List[StrategyMetadata]:
        return [strategy.metadata for strategy in self._strategies.values()]

    def __contains__(self, strategy_id: object) -> bool:
        return isinstance(strategy_id, str) and self.find(strategy_id) is not None

    def __len__(self) -> int:
        return len(self._strategies)


def build_default_registry() -> StrategyRegistry:
    """Registry pre-populated with every built-in vendor strategy."""
    return StrategyRegistry(
        [
            DeepSeekStrategy(),
            MoonshotStrategy(),
            AIHubMixStrategy(),
            OpenRouterStrategy(),
            VolcEngineStrategy(),
            PPIOStrategy(),
        ]
    )


__all__ = ["StrategyRegistry", "build_default_registry"]
