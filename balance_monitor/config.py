"""
Configuration settings for the Balance Monitor.

Uses Pydantic Settings to load environment variables for logging, the HTTP
request engine, and scheduler defaults. Target definitions themselves are
supplied by the config collaborator (see `infrastructure.target_store`).
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # HTTP request engine
    http_default_timeout_ms: int = Field(10_000, alias="HTTP_DEFAULT_TIMEOUT_MS")
    http_user_agent: str = Field("BalanceMonitor/1.0", alias="HTTP_USER_AGENT")
    http_connect_retries: int = Field(0, alias="HTTP_CONNECT_RETRIES")

    # Scheduler defaults
    monitor_min_interval_seconds: int = Field(5, alias="MONITOR_MIN_INTERVAL_SECONDS")
    default_warning_threshold: float = Field(50.0, alias="DEFAULT_WARNING_THRESHOLD")
    default_danger_threshold: float = Field(10.0, alias="DEFAULT_DANGER_THRESHOLD")

    # Config collaborator
    targets_file: str = Field("targets.json", alias="TARGETS_FILE")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
