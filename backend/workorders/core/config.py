"""Application settings and environment configuration loading."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Self
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BACKEND_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_ENV_FILE = BACKEND_ROOT / ".env"
CLOCK_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class Settings(BaseSettings):
    """Typed runtime configuration sourced from environment variables."""

    model_config = SettingsConfigDict(
        # Load `backend/.env` regardless of current working directory.
        env_file=[DEFAULT_ENV_FILE, ".env"],
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: str = "dev"
    database_url: str = "sqlite+aiosqlite:///./workorders.db"

    cors_origins: str = ""
    base_url: str = ""

    # Database lifecycle
    db_auto_migrate: bool = False

    # Civil calendar used for every schedule decision, independent of host TZ.
    operational_timezone: str = "Asia/Jerusalem"
    # Fallbacks when the settings table has no row for these keys yet.
    default_workday_start_time: str = "08:00"
    default_workday_end_time: str = "18:00"

    confirmation_token_ttl_days: int = Field(default=30, ge=1)
    confirmation_base_url: str = ""

    # Background queue (task change events) and sweep scheduling
    rq_redis_url: str = "redis://localhost:6379/0"
    rq_queue_name: str = "workorders"
    rq_dispatch_throttle_seconds: float = 0.0
    rq_dispatch_max_retries: int = 3
    rq_dispatch_retry_base_seconds: float = 2.0
    rq_dispatch_retry_max_seconds: float = 120.0

    sweep_schedule_interval_seconds: int = Field(default=60, ge=1)
    autoclose_schedule_id: str = "workorders-autoclose-sweep"
    daily_schedule_schedule_id: str = "workorders-daily-schedule-sweep"

    # Notification sink: "queue" pushes events to Redis, "log" only logs them.
    notification_sink: str = "queue"

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"
    log_use_utc: bool = False
    request_log_slow_ms: int = Field(default=1000, ge=0)
    request_log_include_health: bool = False

    @model_validator(mode="after")
    def _defaults(self) -> Self:
        try:
            ZoneInfo(self.operational_timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(
                f"OPERATIONAL_TIMEZONE {self.operational_timezone!r} is not a known IANA zone.",
            ) from exc
        for name in ("default_workday_start_time", "default_workday_end_time"):
            if not CLOCK_TIME_PATTERN.match(getattr(self, name)):
                raise ValueError(f"{name.upper()} must be formatted as HH:MM.")
        if self.notification_sink not in {"queue", "log"}:
            raise ValueError("NOTIFICATION_SINK must be either 'queue' or 'log'.")
        # In dev, default to applying Alembic migrations at startup to avoid
        # schema drift (e.g. missing newly-added columns).
        if "db_auto_migrate" not in self.model_fields_set and self.environment == "dev":
            self.db_auto_migrate = True
        return self


settings = Settings()
