"""Manuals database layer."""

from manuals.db.connection import Database
from manuals.db.migrations import MIGRATIONS, run_migrations
from manuals.db.schema import initialize

__all__ = [
    "Database",
    "initialize",
    "run_migrations",
    "MIGRATIONS",
]
