"""Persistent store contract consumed by the result cache."""

from __future__ import annotations

import threading
from collections.abc import Iterable
from typing import Protocol

from agent_core.cache.models import CachedResult


class CacheStore(Protocol):
    """Record store with primary and secondary (cache key, owner) lookups.

    Each insert and delete must be applied atomically; nothing else is
    transactional.
    """

    def insert(self, record: CachedResult) -> None:
        """Persist a new record."""

    def get(self, record_id: str) -> CachedResult | None:
        """Point lookup by primary key."""

    def find_by_cache_key(self, cache_key: str) -> list[CachedResult]:
        """Records stored under ``cache_key``, oldest first."""

    def find_by_owner(self, owner_id: str) -> list[CachedResult]:
        """Records created by ``owner_id``, oldest first."""

    def delete(self, record_id: str) -> None:
        """Delete one record; missing ids are ignored."""

    def bulk_delete(self, record_ids: Iterable[str]) -> int:
        """Delete many records and return how many existed."""

    def scan(self) -> list[CachedResult]:
        """Every record, oldest first."""

    def clear(self) -> None:
        """Delete every record."""


class InMemoryCacheStore:
    """Process-local store; one instance per cache, never a module global."""

    def __init__(self) -> None:
        self._records: dict[str, CachedResult] = {}
        self._lock = threading.Lock()

    def insert(self, record: CachedResult) -> None:
        with self._lock:
            if record.id in self._records:
                raise KeyError(f"Duplicate cache record id: {record.id}")
            self._records[record.id] = record

    def get(self, record_id: str) -> CachedResult | None:
        with self._lock:
            return self._records.get(record_id)

    def find_by_cache_key(self, cache_key: str) -> list[CachedResult]:
        with self._lock:
            return [record for record in self._records.values() if record.cache_key == cache_key]

    def find_by_owner(self, owner_id: str) -> list[CachedResult]:
        with self._lock:
            return [record for record in self._records.values() if record.owner_id == owner_id]

    def delete(self, record_id: str) -> None:
        with self._lock:
            self._records.pop(record_id, None)

    def bulk_delete(self, record_ids: Iterable[str]) -> int:
        removed = 0
        with self._lock:
            for record_id in record_ids:
                if self._records.pop(record_id, None) is not None:
                    removed += 1
        return removed

    def scan(self) -> list[CachedResult]:
        with self._lock:
            return list(self._records.values())

    def clear(self) -> None:
        with self._lock:
            self._records.clear()
