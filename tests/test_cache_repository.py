from __future__ import annotations

import sqlite3
from datetime import UTC, datetime, timedelta
from pathlib import Path

import allure

from agent_core.cache.models import CachedResult
from agent_core.cache.repository import SqliteCacheStore

pytestmark = [
    allure.epic("Result Cache"),
    allure.feature("SQLite Store"),
]

T0 = datetime(2026, 10, 19, 9, 0, tzinfo=UTC)


def _record(record_id: str, *, owner: str = "echo", key: str = "k", offset: int = 0) -> CachedResult:
    created = T0 + timedelta(seconds=offset)
    return CachedResult(
        id=record_id,
        owner_id=owner,
        cache_key=key,
        payload={"data": record_id, "items": [1, 2]},
        created_at=created,
        expires_at=created + timedelta(hours=1),
    )


def test_schema_is_migrated_to_head(sqlite_store: SqliteCacheStore) -> None:
    connection = sqlite3.connect(sqlite_store.db_path)
    try:
        version = connection.execute("SELECT version_num FROM alembic_version").fetchone()
        columns = [row[1] for row in connection.execute("PRAGMA table_info(agent_result_cache)")]
    finally:
        connection.close()

    assert version == ("20261019_0001",)
    assert columns == ["id", "owner_id", "cache_key", "payload_json", "created_at", "expires_at"]


def test_init_schema_is_idempotent(sqlite_store: SqliteCacheStore) -> None:
    sqlite_store.insert(_record("a"))

    sqlite_store.init_schema()

    assert [record.id for record in sqlite_store.scan()] == ["a"]


def test_insert_and_point_lookup_round_trip(sqlite_store: SqliteCacheStore) -> None:
    sqlite_store.insert(_record("a"))

    loaded = sqlite_store.get("a")

    assert loaded == _record("a")
    assert loaded is not None and loaded.created_at.tzinfo is not None
    assert sqlite_store.get("missing") is None


def test_secondary_lookups_return_oldest_first(sqlite_store: SqliteCacheStore) -> None:
    sqlite_store.insert(_record("newer", key="shared", offset=5))
    sqlite_store.insert(_record("older", key="shared", offset=1))
    sqlite_store.insert(_record("foreign", owner="other", key="other"))

    assert [r.id for r in sqlite_store.find_by_cache_key("shared")] == ["older", "newer"]
    assert [r.id for r in sqlite_store.find_by_owner("echo")] == ["older", "newer"]
    assert [r.id for r in sqlite_store.scan()] == ["foreign", "older", "newer"]


def test_delete_bulk_delete_and_clear(sqlite_store: SqliteCacheStore) -> None:
    for index in range(4):
        sqlite_store.insert(_record(f"r{index}", offset=index))

    sqlite_store.delete("r0")
    sqlite_store.delete("missing")
    assert sqlite_store.bulk_delete(["r1", "r2", "missing"]) == 2
    assert sqlite_store.bulk_delete([]) == 0
    assert [record.id for record in sqlite_store.scan()] == ["r3"]

    sqlite_store.clear()
    assert sqlite_store.scan() == []


def test_init_schema_creates_missing_directories(tmp_path: Path) -> None:
    db_path = tmp_path / "nested" / "dir" / "cache.db"
    store = SqliteCacheStore(db_path)
    try:
        store.init_schema()
        store.insert(_record("a"))

        assert db_path.exists()
        assert [record.id for record in store.scan()] == ["a"]
    finally:
        store.close()
