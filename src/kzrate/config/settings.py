# src/kzrate/config/settings.py
"""
Settings - Pydantic-based Configuration Management

Provides centralized configuration management using Pydantic Settings.
Values come from environment variables or a ``.env`` file and are validated
on load.

Files that USE this module:
- kzrate.app (loads settings for wiring, bot_data and scheduling)
- tests.test_settings (unit tests)

Files that this module USES:
- kzrate.shared.validators (validation functions for settings)
- kzrate.domain.models (ThresholdConfig, LookbackWindow)
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from kzrate.domain.models import LookbackWindow, ThresholdConfig
from kzrate.shared.validators import validate_bot_token, validate_chat_id, validate_username


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Telegram ---
    bot_token: str = Field(..., alias="BOT_TOKEN")
    chat_id: str = Field(..., alias="CHAT_ID")
    admin_username: str = Field(default="", alias="ADMIN_USERNAME")

    # --- kurs.kz crawler ---
    kurs_url: str = Field(default="https://kurs.kz/", alias="KURS_URL")
    http_timeout_seconds: int = Field(default=10, alias="HTTP_TIMEOUT_SECONDS", ge=1, le=60)
    kurs_cache_minutes: int = Field(default=1, alias="KURS_CACHE_MINUTES", ge=0, le=60)

    # --- Scheduling ---
    scheduler_interval_minutes: int = Field(
        default=60, alias="SCHEDULER_INTERVAL_MINUTES", ge=1, le=1440
    )

    # --- History ---
    database_path: Path = Field(
        default=Path("./data/currency-history.db"), alias="DATABASE_PATH"
    )
    retention_days: int = Field(default=30, alias="RETENTION_DAYS", ge=1)
    top_quotes_count: int = Field(default=5, alias="TOP_QUOTES_COUNT", ge=1)

    # --- Alert thresholds (% change vs baseline) ---
    threshold_hour_warning_pct: float = Field(default=0.5, alias="THRESHOLD_HOUR_WARNING_PCT", gt=0.0)
    threshold_hour_critical_pct: float = Field(default=1.0, alias="THRESHOLD_HOUR_CRITICAL_PCT", gt=0.0)
    threshold_day_warning_pct: float = Field(default=1.0, alias="THRESHOLD_DAY_WARNING_PCT", gt=0.0)
    threshold_day_critical_pct: float = Field(default=2.0, alias="THRESHOLD_DAY_CRITICAL_PCT", gt=0.0)
    threshold_week_warning_pct: float = Field(default=2.0, alias="THRESHOLD_WEEK_WARNING_PCT", gt=0.0)
    threshold_week_critical_pct: float = Field(default=4.0, alias="THRESHOLD_WEEK_CRITICAL_PCT", gt=0.0)
    threshold_month_warning_pct: float = Field(default=3.0, alias="THRESHOLD_MONTH_WARNING_PCT", gt=0.0)
    threshold_month_critical_pct: float = Field(default=5.0, alias="THRESHOLD_MONTH_CRITICAL_PCT", gt=0.0)

    # --- Logging ---
    log_file: Optional[str] = Field(default=None, alias="LOG_FILE")
    log_dir: Optional[str] = Field(default=None, alias="LOG_DIR")
    log_max_bytes: int = Field(default=10 * 1024 * 1024, alias="LOG_MAX_BYTES")  # 10MB
    log_backup_count: int = Field(default=5, alias="LOG_BACKUP_COUNT")

    @field_validator("bot_token")
    @classmethod
    def validate_bot_token(cls, v: str) -> str:
        """Validate bot token format."""
        if not validate_bot_token(v):
            raise ValueError("Invalid BOT_TOKEN format")
        return v

    @field_validator("chat_id")
    @classmethod
    def validate_chat_id(cls, v: str) -> str:
        """Validate chat ID format."""
        if not validate_chat_id(v):
            raise ValueError("Invalid CHAT_ID format")
        return v

    @field_validator("admin_username")
    @classmethod
    def validate_admin_username(cls, v: str) -> str:
        """Validate admin username; empty disables admin commands."""
        if v and not validate_username(v):
            raise ValueError("Invalid ADMIN_USERNAME format")
        return v.lstrip("@")

    @model_validator(mode="after")
    def validate_thresholds(self) -> "Settings":
        """Build the table once so a misordered pair fails at startup."""
        self.threshold_table()
        return self

    def threshold_table(self) -> tuple[ThresholdConfig, ...]:
        """
        Build the immutable threshold table consumed by the detector.

        Returns:
            One ThresholdConfig per look-back window, HOUR to MONTH

        Raises:
            ValueError: If any window has warning >= critical
        """
        return (
            ThresholdConfig(
                LookbackWindow.HOUR,
                self.threshold_hour_warning_pct,
                self.threshold_hour_critical_pct,
            ),
            ThresholdConfig(
                LookbackWindow.DAY,
                self.threshold_day_warning_pct,
                self.threshold_day_critical_pct,
            ),
            ThresholdConfig(
                LookbackWindow.WEEK,
                self.threshold_week_warning_pct,
                self.threshold_week_critical_pct,
            ),
            ThresholdConfig(
                LookbackWindow.MONTH,
                self.threshold_month_warning_pct,
                self.threshold_month_critical_pct,
            ),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per process."""
    return Settings()
