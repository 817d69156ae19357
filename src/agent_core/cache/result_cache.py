"""TTL- and capacity-bounded result cache over an injected store."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any
from uuid import uuid4

from agent_core.cache.keys import cache_key_digest
from agent_core.cache.models import CachedResult, CacheStats
from agent_core.cache.store import CacheStore
from agent_core.storage.common import utc_now

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 24 * 60 * 60
DEFAULT_MAX_ENTRIES = 100


class ResultCache:
    """Content-addressed cache with lazy expiry and eviction on write.

    Expired records are purged only when read. Capacity is enforced after
    each ``set`` across all owners sharing the store; concurrent writers may
    leave the store briefly above ``max_entries``.
    """

    def __init__(
        self,
        store: CacheStore,
        *,
        clock: Callable[[], datetime] = utc_now,
        default_ttl_seconds: float = DEFAULT_TTL_SECONDS,
        default_max_entries: int = DEFAULT_MAX_ENTRIES,
    ) -> None:
        _check_ttl(default_ttl_seconds)
        _check_max_entries(default_max_entries)
        self.store = store
        self._clock = clock
        self.default_ttl_seconds = default_ttl_seconds
        self.default_max_entries = default_max_entries

    def get(self, cache_key: str) -> Any | None:
        """Payload for ``cache_key``, or ``None`` when absent or expired."""

        matches = self.store.find_by_cache_key(cache_key)
        if not matches:
            return None
        record = matches[0]
        if record.is_expired(self._clock()):
            logger.debug("Cache entry %s expired, purging", cache_key_digest(cache_key))
            self.store.delete(record.id)
            return None
        return record.payload

    def set(
        self,
        owner_id: str,
        cache_key: str,
        payload: Any,
        ttl_seconds: float | None = None,
        max_entries: int | None = None,
    ) -> str:
        """Store ``payload`` and evict the oldest records above capacity.

        ``None`` is rejected because :meth:`get` uses it to report a miss.
        """

        if payload is None:
            raise ValueError("Cannot cache a None payload")
        ttl = self.default_ttl_seconds if ttl_seconds is None else ttl_seconds
        capacity = self.default_max_entries if max_entries is None else max_entries
        _check_ttl(ttl)
        _check_max_entries(capacity)

        now = self._clock()
        record_id = f"agent-cache-{uuid4().hex}"
        self.store.insert(
            CachedResult(
                id=record_id,
                owner_id=owner_id,
                cache_key=cache_key,
                payload=payload,
                created_at=now,
                expires_at=now + timedelta(seconds=ttl),
            ),
        )

        records = self.store.scan()
        overflow = len(records) - capacity
        if overflow > 0:
            oldest = sorted(records, key=lambda record: record.created_at)[:overflow]
            removed = self.store.bulk_delete(record.id for record in oldest)
            logger.info("Evicted %d cache entries over capacity %d", removed, capacity)
        return record_id

    def clear_cache(self, owner_id: str) -> int:
        """Delete every record of ``owner_id``; returns the number removed."""

        records = self.store.find_by_owner(owner_id)
        return self.store.bulk_delete(record.id for record in records)

    def clear_all_cache(self) -> None:
        self.store.clear()

    def get_cache_stats(self) -> CacheStats:
        now = self._clock()
        records = self.store.scan()
        return CacheStats(
            total=len(records),
            expired=sum(1 for record in records if record.is_expired(now)),
        )


def _check_ttl(ttl_seconds: float) -> None:
    if ttl_seconds < 0:
        raise ValueError(f"ttl_seconds must be >= 0, got {ttl_seconds}")


def _check_max_entries(max_entries: int) -> None:
    if max_entries < 1:
        raise ValueError(f"max_entries must be >= 1, got {max_entries}")
