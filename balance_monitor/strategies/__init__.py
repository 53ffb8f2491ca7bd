"""
Strategies package for the Balance Monitor.

This module re-exports the abstract interfaces, the registry, and the concrete
vendor strategies so downstream code can import from
`balance_monitor.strategies` directly.
"""

from balance_monitor.strategies.abstract import (
    AbstractVendorStrategy,
    StrategyMetadata,
    VendorStrategy,
    standardize_currency,
    to_float,
)
from balance_monitor.strategies.aihubmix import AIHubMixStrategy
from balance_monitor.strategies.deepseek import DeepSeekStrategy
from balance_monitor.strategies.moonshot import MoonshotStrategy
from balance_monitor.strategies.openrouter import OpenRouterStrategy
from balance_monitor.strategies.path_mapping import PathMappingStrategy
from balance_monitor.strategies.ppio import PPIOStrategy
from balance_monitor.strategies.registry import StrategyRegistry, build_default_registry
from balance_monitor.strategies.volcengine import VolcEngineStrategy

__all__ = [
    # Abstracts
    "AbstractVendorStrategy",
    "StrategyMetadata",
    "VendorStrategy",
    "standardize_currency",
    "to_float",
    # Registry
    "StrategyRegistry",
    "build_default_registry",
    # Concrete strategies
    "AIHubMixStrategy",
    "DeepSeekStrategy",
    "MoonshotStrategy",
    "OpenRouterStrategy",
    "PathMappingStrategy",
    "PPIOStrategy",
    "VolcEngineStrategy",
]
