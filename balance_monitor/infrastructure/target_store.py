"""
Target sources for the scheduler.

`TargetProvider` is the read interface the scheduler consumes. The in-memory
store is enough for embedding and tests. The CLI loads a plain JSON targets
file whose optional `mappings` section defines path-mapping strategies::

    {
      "targets": [
        {"id": "ds", "name": "DeepSeek", "strategy_id": "deepseek",
         "interval_seconds": 30, "warning_threshold": 50, "danger_threshold": 10,
         "request": {"url": "https://api.deepseek.com/user/balance",
                     "auth": {"type": "Bearer", "api_key": "sk-..."}}}
      ],
      "mappings": {
        "acme": {"balance_path": "account.wallets[0].amount", "currency": "USD"}
      }
    }

Secrets arrive already decrypted; storage at rest is not handled here.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol

from pydantic import BaseModel, Field

from balance_monitor.config import Settings, get_settings
from balance_monitor.domain.models import MonitorTarget, utc_now
from balance_monitor.strategies.path_mapping import PathMappingStrategy
from balance_monitor.strategies.registry import StrategyRegistry


class TargetProvider(Protocol):
    def get_target(self, target_id: str) -> Optional[MonitorTarget]: ...

    def list_targets(self) -> List[MonitorTarget]: ...


class InMemoryTargetStore:
    def __init__(self, targets: Iterable[MonitorTarget] = ()) -> None:
        self._targets: Dict[str, MonitorTarget] = {}
        for target in targets:
            self._targets[target.id] = target

    def upsert(self, target: MonitorTarget) -> MonitorTarget:
        """Insert or replace a target, stamping `updated_at` on replacement."""
        if target.id in self._targets:
            target = target.model_copy(update={"updated_at": utc_now()})
        self._targets[target.id] = target
        return target

    def remove(self, target_id: str) -> bool:
        return self._targets.pop(target_id, None) is not None

    def get_target(self, target_id: str) -> Optional[MonitorTarget]:
        return self._targets.get(target_id)

    def list_targets(self) -> List[MonitorTarget]:
        return list(self._targets.values())


class PathMappingConfig(BaseModel):
    balance_path: str
    currency_path: Optional[str] = None
    currency: Optional[str] = None
    granted_path: Optional[str] = None
    topped_up_path: Optional[str] = None
    is_available_path: Optional[str] = None
    name: Optional[str] = None


class TargetsFile(BaseModel):
    targets: List[MonitorTarget] = Field(default_factory=list)
    mappings: Dict[str, PathMappingConfig] = Field(default_factory=dict)

    def register_mappings(self, registry: StrategyRegistry) -> None:
        for strategy_id, mapping in self.mappings.items():
            registry.register(
                strategy_id, PathMappingStrategy(strategy_id, **mapping.model_dump())
            )

    def to_store(self) -> InMemoryTargetStore:
        return InMemoryTargetStore(self.targets)


def load_targets_file(path: Path | str, settings: Optional[Settings] = None) -> TargetsFile:
    """
    Read and validate a JSON targets file.

    Targets that omit `warning_threshold` / `danger_threshold` get
    `DEFAULT_WARNING_THRESHOLD` / `DEFAULT_DANGER_THRESHOLD` from settings.
    """
    settings = settings or get_settings()
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(raw, dict):
        for target in raw.get("targets") or []:
            if isinstance(target, dict):
                target.setdefault("warning_threshold", settings.default_warning_threshold)
                target.setdefault("danger_threshold", settings.default_danger_threshold)
    return TargetsFile.model_validate(raw)


__all__ = [
    "InMemoryTargetStore",
    "PathMappingConfig",
    "TargetProvider",
    "TargetsFile",
    "load_targets_file",
]
