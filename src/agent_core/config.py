"""Runtime configuration for step execution and the result cache."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from agent_core.execution.retry import RetryConfig


@dataclass(slots=True)
class RetrySettings:
    """Default retry policy for steps without their own configuration."""

    max_retries: int = 3
    delays_seconds: tuple[float, ...] = (1.0, 2.0, 4.0)

    def to_retry_config(self) -> RetryConfig:
        return RetryConfig(max_retries=self.max_retries, delays=self.delays_seconds)


@dataclass(slots=True)
class CacheSettings:
    """Result cache settings."""

    enabled: bool = True
    ttl_seconds: int = 86_400
    max_entries: int = 100


@dataclass(slots=True)
class Settings:
    """Application settings grouped by concern."""

    db_path: Path = Path(".agent_core.db")
    sqlite_busy_timeout_ms: int = 5_000
    retry: RetrySettings = field(default_factory=RetrySettings)
    cache: CacheSettings = field(default_factory=CacheSettings)

    @classmethod
    def from_env(cls, db_path: Path | None = None) -> Settings:
        """Load settings from environment with sane defaults for local development."""

        return cls(
            db_path=db_path or Path(os.getenv("AGENT_CORE_DB_PATH", ".agent_core.db")),
            sqlite_busy_timeout_ms=_env_int("AGENT_CORE_SQLITE_BUSY_TIMEOUT_MS", 5_000),
            retry=RetrySettings(
                max_retries=_env_int("AGENT_CORE_RETRY_MAX_RETRIES", 3),
                delays_seconds=_env_delays("AGENT_CORE_RETRY_DELAYS_SECONDS", (1.0, 2.0, 4.0)),
            ),
            cache=CacheSettings(
                enabled=_env_bool("AGENT_CORE_CACHE_ENABLED", default=True),
                ttl_seconds=_env_int("AGENT_CORE_CACHE_TTL_SECONDS", 86_400),
                max_entries=_env_int("AGENT_CORE_CACHE_MAX_ENTRIES", 100),
            ),
        )

    def validate(self) -> None:
        """Raise configuration error for out-of-range values."""

        if self.sqlite_busy_timeout_ms <= 0:
            raise ValueError("AGENT_CORE_SQLITE_BUSY_TIMEOUT_MS must be > 0.")
        if self.retry.max_retries < 0:
            raise ValueError("AGENT_CORE_RETRY_MAX_RETRIES must be >= 0.")
        if any(delay < 0 for delay in self.retry.delays_seconds):
            raise ValueError("AGENT_CORE_RETRY_DELAYS_SECONDS must not contain negative values.")
        if self.cache.ttl_seconds < 0:
            raise ValueError("AGENT_CORE_CACHE_TTL_SECONDS must be >= 0.")
        if self.cache.max_entries <= 0:
            raise ValueError("AGENT_CORE_CACHE_MAX_ENTRIES must be a positive integer.")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError as error:
        raise ValueError(f"Invalid integer value for {name}: {raw!r}") from error


def _env_delays(name: str, default: tuple[float, ...]) -> tuple[float, ...]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    delays: list[float] = []
    for part in raw.split(","):
        token = part.strip()
        if not token:
            continue
        try:
            delays.append(float(token))
        except ValueError as error:
            raise ValueError(f"Invalid {name} entry: {token!r}") from error
    return tuple(delays)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"Invalid boolean value for {name}: {value!r}")
