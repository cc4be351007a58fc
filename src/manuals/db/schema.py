"""Database schema initialization."""

from __future__ import annotations

import sqlite3

from manuals.db.migrations import MIGRATIONS, run_migrations

CURRENT_VERSION = MIGRATIONS[-1][0]

# Deleted in this order by Repository.clear_all(); FTS first since it has no
# foreign key to cascade from.
DATA_TABLES: tuple[str, ...] = (
    "search_fts",
    "specifications",
    "pinouts",
    "guides",
    "devices",
)


def initialize(conn: sqlite3.Connection) -> None:
    """Initialize the database schema via the migration runner (idempotent)."""
    run_migrations(conn)
