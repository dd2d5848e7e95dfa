import os
from typing import List
from pydantic import BaseModel, Field


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


class SchedulerConfig(BaseModel):
    """Settings owned by the admission scheduler; read once per tick."""
    enabled: bool = False
    initial_delay_seconds: float = Field(default=10.0, ge=0)
    interval_seconds: float = Field(default=5.0, gt=0)
    batch_size: int = Field(default=3, ge=0)
    max_concurrency: int = Field(default=10, ge=1)
    scan_count: int = Field(default=100, ge=1)


class Settings(BaseModel):
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_SOCKET_TIMEOUT: float = Field(default=5.0, gt=0)
    SCHEDULER_ENABLED: bool = False
    SCHEDULER_INITIAL_DELAY_SECONDS: float = Field(default=10.0, ge=0)
    SCHEDULER_INTERVAL_SECONDS: float = Field(default=5.0, gt=0)
    SCHEDULER_BATCH_SIZE: int = Field(default=3, ge=0)
    SCHEDULER_MAX_CONCURRENCY: int = Field(default=10, ge=1)
    SCHEDULER_SCAN_COUNT: int = Field(default=100, ge=1)
    ATOMIC_PROMOTION: bool = False
    TOKEN_PREFIX: str = "user-queue"
    TOKEN_COOKIE_MAX_AGE: int = Field(default=300, gt=0)
    RATE_LIMIT: str = "60/minute"
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_FILE_PATH: str = "logs/app.log"

    @classmethod
    def load_from_env(cls):
        cors_origins_str = os.getenv("CORS_ORIGINS", "http://localhost:3000")
        cors_origins = [origin.strip() for origin in cors_origins_str.split(",") if origin.strip()]

        return cls(
            REDIS_URL=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
            REDIS_SOCKET_TIMEOUT=_env_float("REDIS_SOCKET_TIMEOUT", 5.0),
            SCHEDULER_ENABLED=_env_bool("SCHEDULER_ENABLED", False),
            SCHEDULER_INITIAL_DELAY_SECONDS=_env_float("SCHEDULER_INITIAL_DELAY_SECONDS", 10.0),
            SCHEDULER_INTERVAL_SECONDS=_env_float("SCHEDULER_INTERVAL_SECONDS", 5.0),
            SCHEDULER_BATCH_SIZE=_env_int("SCHEDULER_BATCH_SIZE", 3),
            SCHEDULER_MAX_CONCURRENCY=_env_int("SCHEDULER_MAX_CONCURRENCY", 10),
            SCHEDULER_SCAN_COUNT=_env_int("SCHEDULER_SCAN_COUNT", 100),
            ATOMIC_PROMOTION=_env_bool("ATOMIC_PROMOTION", False),
            TOKEN_PREFIX=os.getenv("TOKEN_PREFIX", "user-queue"),
            TOKEN_COOKIE_MAX_AGE=_env_int("TOKEN_COOKIE_MAX_AGE", 300),
            RATE_LIMIT=os.getenv("RATE_LIMIT", "60/minute"),
            CORS_ORIGINS=cors_origins,
            ENVIRONMENT=os.getenv("ENVIRONMENT", "development"),
            LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
            LOG_FILE_PATH=os.getenv("LOG_FILE_PATH", "logs/app.log"),
        )

    def scheduler_config(self) -> SchedulerConfig:
        return SchedulerConfig(
            enabled=self.SCHEDULER_ENABLED,
            initial_delay_seconds=self.SCHEDULER_INITIAL_DELAY_SECONDS,
            interval_seconds=self.SCHEDULER_INTERVAL_SECONDS,
            batch_size=self.SCHEDULER_BATCH_SIZE,
            max_concurrency=self.SCHEDULER_MAX_CONCURRENCY,
            scan_count=self.SCHEDULER_SCAN_COUNT,
        )

# Load settings immediately so a bad environment fails at startup/import time.
try:
    settings = Settings.load_from_env()
except ValueError as e:
    print(f"CRITICAL: Configuration Error: {e}")
    raise e
