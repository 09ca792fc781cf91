"""Idempotent SQLite upkeep run at startup, after ``create_all``."""

from __future__ import annotations

from typing import Iterable

from sqlalchemy import text
from sqlalchemy.engine import Engine

# ``create_all`` skips tables that already exist, and with them any index
# declared on the model later. These are re-issued on every start.
TICKET_INDEXES: dict[str, tuple[str, ...]] = {
    "ix_tickets_sibling_group": ("project_id", "parent_id", "sort_order"),
}


def _table_exists(engine: Engine, table: str) -> bool:
    with engine.connect() as conn:
        row = conn.execute(
            text("SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = :name"), {"name": table}
        ).first()
    return row is not None


def _create_index_if_not_exists(engine: Engine, table: str, name: str, cols: Iterable[str], unique: bool = False) -> None:
    cols_sql = ", ".join(cols)
    unique_sql = "UNIQUE " if unique else ""
    with engine.begin() as conn:
        conn.execute(text(f"CREATE {unique_sql}INDEX IF NOT EXISTS {name} ON {table} ({cols_sql})"))


def run_migrations(engine: Engine) -> None:
    """Make sure the sibling-group index exists on an existing tickets table."""

    if not str(engine.url).startswith("sqlite"):
        return
    if not _table_exists(engine, "tickets"):
        return
    for name, cols in TICKET_INDEXES.items():
        _create_index_if_not_exists(engine, "tickets", name, cols)
