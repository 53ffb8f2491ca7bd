"""
Domain models for the Balance Monitor.

Defines the monitored-target schema supplied by the config collaborator, the
normalized balance record produced by vendor strategies, per-target run
state, and the notification payloads emitted by the scheduler.
"""
from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from balance_monitor.domain.thresholds import AlertLevel, BalanceStatus

RunStatus = Literal["running", "stopped", "error"]
HttpMethod = Literal["GET", "POST"]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class HeaderEntry(BaseModel):
    key: str
    value: str

    model_config = {"frozen": True}


class AuthDescriptor(BaseModel):
    """
    How to build the authentication header.

    `type` is "Bearer", "Basic", or anything else (API key / custom), in which
    case the raw key is sent as the header value.
    """

    type: str = Field("Bearer", description="Bearer, Basic, ApiKey or Custom.")
    api_key: str = Field("", description="Secret key, already decrypted.")
    header_key: str = Field("Authorization", description="Header name to set.")

    model_config = {"frozen": True}


class RequestDescriptor(BaseModel):
    """
    A single outbound HTTP request definition.
    """

    url: str
    method: HttpMethod = "GET"
    headers: List[HeaderEntry] = Field(default_factory=list)
    auth: Optional[AuthDescriptor] = None
    timeout_ms: Optional[int] = Field(None, gt=0, description="None uses settings default.")
    body: Optional[str] = None

    model_config = {"frozen": True}

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    @field_validator("headers", mode="before")
    @classmethod
    def _headers_from_mapping(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return [{"key": k, "value": v} for k, v in value.items()]
        return value


class MonitorTarget(BaseModel):
    """
    A user-defined monitoring job. Read-only to the core.

    Threshold and interval invariants are checked by the scheduler on start
    so that every violation can be reported at once.
    """

    id: str
    name: str
    request: RequestDescriptor
    strategy_id: str
    interval_seconds: int = 60
    warning_threshold: float = 50.0
    danger_threshold: float = 10.0
    currency: str = "CNY"
    enabled: bool = True
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    model_config = {"frozen": True}


class StandardBalance(BaseModel):
    """
    Normalized balance extracted from a vendor response.

    `available_balance` is finite or +inf (unlimited); NaN and -inf are rejected.
    """

    currency: str
    available_balance: float
    total_balance: Optional[float] = None
    granted_balance: Optional[float] = None
    topped_up_balance: Optional[float] = None
    cash_balance: Optional[float] = None
    voucher_balance: Optional[float] = None
    total_credits: Optional[float] = None
    total_usage: Optional[float] = None
    status: BalanceStatus
    last_updated: datetime = Field(default_factory=utc_now)
    meta: Dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}

    @field_validator("available_balance")
    @classmethod
    def _no_nan(cls, value: float) -> float:
        if math.isnan(value) or value == -math.inf:
            raise ValueError("available_balance must be finite or +inf")
        return value

    @property
    def is_available(self) -> bool:
        return self.status != "inactive"

    @property
    def is_unlimited(self) -> bool:
        return self.available_balance == math.inf


class RequestResult(BaseModel):
    """
    Uniform envelope returned by the request engine for every call.
    """

    success: bool
    data: Any = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    status_code: Optional[int] = None
    response_time_ms: int = 0


class MonitorRunState(BaseModel):
    """
    Per-target scheduling bookkeeping. Mutated only by the scheduler.
    """

    target_id: str
    status: RunStatus = "stopped"
    last_run: Optional[datetime] = None
    next_run: Optional[datetime] = None
    success_count: int = 0
    error_count: int = 0


class _EventModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_payload(self) -> Dict[str, Any]:
        """Camel-cased JSON-safe dict as delivered to UI collaborators."""
        return self.model_dump(mode="json", by_alias=True)


class StatusChangeEvent(_EventModel):
    config_id: str
    status: RunStatus
    last_run: Optional[datetime] = None
    next_run: Optional[datetime] = None
    error_count: int = 0
    success_count: int = 0

    @classmethod
    def from_state(cls, state: MonitorRunState) -> "StatusChangeEvent":
        return cls(
            config_id=state.target_id,
            status=state.status,
            last_run=state.last_run,
            next_run=state.next_run,
            error_count=state.error_count,
            success_count=state.success_count,
        )


class BalanceUpdateEvent(_EventModel):
    config_id: str
    success: bool
    balance: Optional[float] = None
    currency: Optional[str] = None
    is_available: Optional[bool] = None
    level: Optional[AlertLevel] = None
    error: Optional[str] = None
    response_time_ms: int = 0
    timestamp: datetime = Field(default_factory=utc_now)


class TickOutcome(BaseModel):
    """
    Result of one fetch-parse-classify cycle for a target.
    """

    target_id: str
    success: bool
    balance: Optional[StandardBalance] = None
    level: Optional[AlertLevel] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    response_time_ms: int = 0


class StartResult(BaseModel):
    success: bool
    message: str


class BulkResult(BaseModel):
    success: bool
    message: str
    started: int = 0
    stopped: int = 0
    failed: int = 0


__all__ = [
    "AuthDescriptor",
    "BalanceUpdateEvent",
    "BulkResult",
    "HeaderEntry",
    "HttpMethod",
    "MonitorRunState",
    "MonitorTarget",
    "RequestDescriptor",
    "RequestResult",
    "RunStatus",
    "StandardBalance",
    "StartResult",
    "StatusChangeEvent",
    "TickOutcome",
    "utc_now",
]
