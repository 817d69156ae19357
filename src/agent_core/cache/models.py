"""Domain models for the result cache."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(slots=True)
class CachedResult:
    """Persisted cache record."""

    id: str
    owner_id: str
    cache_key: str
    payload: Any
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now


@dataclass(slots=True)
class CacheStats:
    """Diagnostic counters; ``expired`` counts records not yet purged."""

    total: int
    expired: int
