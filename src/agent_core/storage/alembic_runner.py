"""Cache database migrations, applied from code rather than the alembic CLI."""

from __future__ import annotations

from pathlib import Path

from alembic import command
from alembic.config import Config

PROJECT_ROOT = Path(__file__).resolve().parents[3]


def migration_config(db_path: Path) -> Config:
    """Alembic config bound to the project's migration scripts and ``db_path``."""

    config = Config(str(PROJECT_ROOT / "alembic.ini"))
    config.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    config.set_main_option("sqlalchemy.url", f"sqlite:///{db_path}")
    return config


def upgrade_head(db_path: Path) -> None:
    """Create or upgrade the cache schema at ``db_path``.

    Missing parent directories are created so a fresh ``--db-path`` works.
    """

    db_path.parent.mkdir(parents=True, exist_ok=True)
    command.upgrade(migration_config(db_path), "head")
