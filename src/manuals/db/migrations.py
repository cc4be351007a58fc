"""Forward-only migration runner for the manuals database schema."""

from __future__ import annotations

import sqlite3

# schema_version is the bootstrap table, created before migrations run.
_CREATE_SCHEMA_VERSION = """
CREATE TABLE IF NOT EXISTS schema_version (
    version     INTEGER NOT NULL,
    applied_at  DATETIME NOT NULL DEFAULT (datetime('now'))
)
"""

_V1_SQL = """
CREATE TABLE IF NOT EXISTS devices (
    id          TEXT PRIMARY KEY,
    domain      TEXT NOT NULL CHECK (domain IN ('hardware', 'software', 'protocol')),
    type        TEXT NOT NULL,
    name        TEXT NOT NULL,
    path        TEXT NOT NULL,
    content     TEXT NOT NULL DEFAULT '',
    metadata    TEXT NOT NULL DEFAULT '{}',
    indexed_at  DATETIME NOT NULL DEFAULT (datetime('now'))
);

CREATE INDEX IF NOT EXISTS idx_devices_domain ON devices(domain);
CREATE INDEX IF NOT EXISTS idx_devices_type ON devices(type);
CREATE INDEX IF NOT EXISTS idx_devices_name ON devices(name);

CREATE TABLE IF NOT EXISTS pinouts (
    device_id       TEXT NOT NULL REFERENCES devices(id) ON DELETE CASCADE,
    physical_pin    INTEGER NOT NULL,
    gpio_num        INTEGER,
    name            TEXT NOT NULL DEFAULT '',
    default_pull    TEXT CHECK (default_pull IN ('high', 'low', 'none')),
    alt_functions   TEXT NOT NULL DEFAULT '[]',
    description     TEXT,
    PRIMARY KEY (device_id, physical_pin)
);

CREATE INDEX IF NOT EXISTS idx_pinouts_name ON pinouts(name);
CREATE INDEX IF NOT EXISTS idx_pinouts_gpio ON pinouts(gpio_num);

CREATE TABLE IF NOT EXISTS specifications (
    device_id   TEXT NOT NULL REFERENCES devices(id) ON DELETE CASCADE,
    key         TEXT NOT NULL,
    value       TEXT NOT NULL,
    unit        TEXT,
    PRIMARY KEY (device_id, key)
);

CREATE INDEX IF NOT EXISTS idx_specs_key ON specifications(key);

CREATE TABLE IF NOT EXISTS guides (
    id          TEXT PRIMARY KEY,
    title       TEXT NOT NULL,
    content     TEXT NOT NULL,
    indexed_at  DATETIME NOT NULL DEFAULT (datetime('now'))
);

CREATE VIRTUAL TABLE IF NOT EXISTS search_fts USING fts5(
    device_id UNINDEXED,
    name,
    content,
    tags,
    tokenize='porter unicode61'
);
"""

# Append-only. Each entry: (version: int, sql: str).
# executescript() issues an implicit COMMIT before running.
MIGRATIONS: list[tuple[int, str]] = [
    (1, _V1_SQL),
]


def run_migrations(conn: sqlite3.Connection) -> None:
    """Apply all pending migrations in ascending version order.

    Idempotent: safe to call on a database at any version.
    """
    conn.execute(_CREATE_SCHEMA_VERSION)
    conn.commit()

    row = conn.execute("SELECT MAX(version) FROM schema_version").fetchone()
    current = row[0] if row[0] is not None else 0

    for version, sql in MIGRATIONS:
        if version > current:
            conn.executescript(sql)
            conn.execute(
                "INSERT INTO schema_version (version) VALUES (?)", (version,)
            )
            conn.commit()
