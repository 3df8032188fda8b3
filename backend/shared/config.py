"""
Central configuration for the Score Sync services.
Uses pydantic-settings for env-based config with validation.
"""
from __future__ import annotations

from enum import Enum
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.models.enums import Sport


class Environment(str, Enum):
    DEV = "dev"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Root settings shared across the coordinator, providers and service."""

    model_config = SettingsConfigDict(
        env_prefix="SS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── General ──────────────────────────────────────────────
    environment: Environment = Environment.DEV
    debug: bool = False
    log_level: str = "INFO"
    instance_id: str = Field(default="", description="Process identifier bound to every log line")

    # ── Coordinator ──────────────────────────────────────────
    sports: list[Sport] = Field(
        default=[Sport.SOCCER, Sport.BASKETBALL, Sport.CRICKET, Sport.HOCKEY],
        description="One coordinator is started per sport.",
    )
    poll_interval_s: float = 60.0
    request_timeout_s: float = 12.0

    # ── Provider ─────────────────────────────────────────────
    provider_base_url: str = "https://prod-cdn-public-api.livescore.com"
    provider_locale: str = "en"
    provider_tz_offset: int = 0
    provider_max_retries: int = 2

    # ── Observability ────────────────────────────────────────
    metrics_enabled: bool = True
    metrics_port: int = 9090

    @field_validator("poll_interval_s", "request_timeout_s")
    @classmethod
    def positive_interval(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("interval must be positive")
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Singleton access to validated settings."""
    return Settings()
