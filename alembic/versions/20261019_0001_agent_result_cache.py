"""Create agent result cache table."""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "agent_result_cache",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("owner_id", sa.String(), nullable=False),
        sa.Column("cache_key", sa.Text(), nullable=False),
        sa.Column("payload_json", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_agent_result_cache_owner_id",
        "agent_result_cache",
        ["owner_id"],
    )
    op.create_index(
        "ix_agent_result_cache_cache_key",
        "agent_result_cache",
        ["cache_key"],
    )
    op.create_index(
        "ix_agent_result_cache_created_at",
        "agent_result_cache",
        ["created_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_agent_result_cache_created_at", table_name="agent_result_cache")
    op.drop_index("ix_agent_result_cache_cache_key", table_name="agent_result_cache")
    op.drop_index("ix_agent_result_cache_owner_id", table_name="agent_result_cache")
    op.drop_table("agent_result_cache")
