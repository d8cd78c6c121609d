"""Centralized application configuration using Pydantic settings."""
from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven configuration shared by the rooms and bookings services."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    database_url: str = Field(
        default="sqlite:///./roombooking.db",
        description="SQLAlchemy database URL. Defaults to local SQLite for development.",
    )
    run_db_migrations: bool = Field(
        default=False,
        description="Whether this service should create/update database tables on startup.",
    )
    seed_demo_data: bool = Field(default=False, description="Seed sample rooms and bookings on startup")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")
    default_rate_limit: str = Field(default="30/minute", description="Global rate limiting rule")
    rate_limiting_enabled: bool = Field(default=True, description="Toggle to disable SlowAPI limits (useful in tests)")
    metrics_enabled: bool = Field(default=True, description="Expose Prometheus metrics on /metrics")
    room_cache_ttl: int = Field(default=60, description="TTL (s) for the cached room directory")
    log_dir: str = Field(default="logs", description="Directory for per-service audit logs")

    storage_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Upper bound (s) for database calls and for waiting on a room lock.",
    )
    storage_failure_threshold: int = Field(
        default=5,
        ge=1,
        description="Consecutive storage failures before the circuit opens",
    )
    storage_recovery_timeout: int = Field(default=30, ge=1, description="Seconds the storage circuit stays open")

    business_open_hour: int = Field(default=8, ge=0, le=23, description="Earliest hour a booking may start")
    last_start_hour: int = Field(default=22, ge=0, le=23, description="Latest hour a booking may start")
    closing_hour: int = Field(default=23, ge=1, le=23, description="Bookings must end by this hour")
    min_booking_minutes: int = Field(default=30, ge=1, description="Shortest allowed booking")
    max_booking_hours: int = Field(default=8, ge=1, description="Longest allowed booking")

    rooms_service_port: int = 8002
    bookings_service_port: int = 8003


@lru_cache
def get_settings() -> Settings:
    """Return a cached instance of the Settings object."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the cached Settings instance (useful for tests)."""

    get_settings.cache_clear()
