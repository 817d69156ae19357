"""SQLModel ORM tables for the result cache."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, Index, Text
from sqlmodel import Field, SQLModel


class AgentResultCacheRow(SQLModel, table=True):
    __tablename__ = "agent_result_cache"  # type: ignore[bad-override]
    __table_args__ = (Index("ix_agent_result_cache_created_at", "created_at"),)

    id: str = Field(primary_key=True)
    owner_id: str = Field(index=True)
    cache_key: str = Field(sa_column=Column(Text, nullable=False, index=True))
    payload_json: str = Field(sa_column=Column(Text, nullable=False))
    created_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
    expires_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
