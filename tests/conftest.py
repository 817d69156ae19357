"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from agent_core.cache.repository import SqliteCacheStore
from agent_core.cache.result_cache import ResultCache
from agent_core.cache.store import InMemoryCacheStore


class FakeClock:
    """Manually advanced UTC clock for TTL tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 10, 19, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def memory_cache(clock: FakeClock) -> ResultCache:
    return ResultCache(InMemoryCacheStore(), clock=clock)


@pytest.fixture()
def sqlite_store(tmp_path: Path) -> Iterator[SqliteCacheStore]:
    store = SqliteCacheStore(tmp_path / "cache.db")
    store.init_schema()
    try:
        yield store
    finally:
        store.close()
