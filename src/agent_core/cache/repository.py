"""SQLite-backed cache store."""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path

from sqlalchemy import delete as sa_delete
from sqlalchemy import literal_column
from sqlmodel import Session, col, select

from agent_core.cache.models import CachedResult
from agent_core.storage.alembic_runner import upgrade_head
from agent_core.storage.common import build_sqlite_engine, ensure_utc
from agent_core.storage.sqlmodel_models import AgentResultCacheRow

_INSERTION_ORDER = (col(AgentResultCacheRow.created_at).asc(), literal_column("rowid").asc())


class SqliteCacheStore:
    """Cache persistence facade backed by SQLModel + SQLite.

    Payloads are stored as JSON text, so only JSON-serializable payloads are
    accepted.
    """

    def __init__(self, db_path: Path, *, sqlite_busy_timeout_ms: int = 5_000) -> None:
        self.db_path = db_path
        self.engine = build_sqlite_engine(db_path=db_path, busy_timeout_ms=sqlite_busy_timeout_ms)

    def close(self) -> None:
        """Close underlying DB resources."""

        self.engine.dispose()

    def init_schema(self) -> None:
        """Run schema migrations."""

        upgrade_head(self.db_path)

    def insert(self, record: CachedResult) -> None:
        with Session(self.engine) as session:
            session.add(
                AgentResultCacheRow(
                    id=record.id,
                    owner_id=record.owner_id,
                    cache_key=record.cache_key,
                    payload_json=json.dumps(record.payload, ensure_ascii=False),
                    created_at=record.created_at,
                    expires_at=record.expires_at,
                ),
            )
            session.commit()

    def get(self, record_id: str) -> CachedResult | None:
        with Session(self.engine) as session:
            row = session.get(AgentResultCacheRow, record_id)
            return _to_record(row) if row is not None else None

    def find_by_cache_key(self, cache_key: str) -> list[CachedResult]:
        with Session(self.engine) as session:
            rows = session.exec(
                select(AgentResultCacheRow)
                .where(AgentResultCacheRow.cache_key == cache_key)
                .order_by(*_INSERTION_ORDER),
            ).all()
            return [_to_record(row) for row in rows]

    def find_by_owner(self, owner_id: str) -> list[CachedResult]:
        with Session(self.engine) as session:
            rows = session.exec(
                select(AgentResultCacheRow)
                .where(AgentResultCacheRow.owner_id == owner_id)
                .order_by(*_INSERTION_ORDER),
            ).all()
            return [_to_record(row) for row in rows]

    def delete(self, record_id: str) -> None:
        with Session(self.engine) as session:
            session.exec(
                sa_delete(AgentResultCacheRow).where(col(AgentResultCacheRow.id) == record_id),
            )
            session.commit()

    def bulk_delete(self, record_ids: Iterable[str]) -> int:
        ids = list(record_ids)
        if not ids:
            return 0
        with Session(self.engine) as session:
            result = session.exec(
                sa_delete(AgentResultCacheRow).where(col(AgentResultCacheRow.id).in_(ids)),
            )
            session.commit()
            return int(result.rowcount or 0)

    def scan(self) -> list[CachedResult]:
        with Session(self.engine) as session:
            rows = session.exec(select(AgentResultCacheRow).order_by(*_INSERTION_ORDER)).all()
            return [_to_record(row) for row in rows]

    def clear(self) -> None:
        with Session(self.engine) as session:
            session.exec(sa_delete(AgentResultCacheRow))
            session.commit()


def _to_record(row: AgentResultCacheRow) -> CachedResult:
    return CachedResult(
        id=row.id,
        owner_id=row.owner_id,
        cache_key=row.cache_key,
        payload=json.loads(row.payload_json),
        created_at=ensure_utc(row.created_at),
        expires_at=ensure_utc(row.expires_at),
    )
