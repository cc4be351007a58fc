"""Repository pattern for all manuals database operations.

Single interface for: devices (+ FTS5 index), pinouts, specifications,
workflow guides, search and catalogue statistics.

Every write method commits on its own unless it runs inside
``Repository.transaction()``; each write is additionally wrapped in a
SAVEPOINT so a failed pinout write never undoes the device row before it.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager

from manuals.db.models import (
    DatabaseStats,
    Device,
    Guide,
    Pinout,
    SearchResult,
    Specification,
)
from manuals.db.schema import DATA_TABLES
from manuals.errors import ClearError, SearchQueryError, StorageWriteError
from manuals.search import SearchOptions, build_fts_query

_DEVICE_COLUMNS = "id, domain, type, name, path, content, metadata, indexed_at"
_DEVICE_LIST_COLUMNS = "id, domain, type, name, path, metadata, indexed_at"
_PINOUT_COLUMNS = "physical_pin, gpio_num, name, default_pull, alt_functions, description"

# SQLite json_each type -> JSON type name
_JSON_TYPE_NAMES = {
    "text": "string",
    "integer": "number",
    "real": "number",
    "true": "boolean",
    "false": "boolean",
    "array": "array",
    "object": "object",
}


class Repository:
    """Data access layer for all manuals database entities.

    Wraps an open sqlite3.Connection. The connection is owned by the caller
    and must be closed after use.
    """

    def __init__(self, conn: sqlite3.Connection, logger: logging.Logger | None = None) -> None:
        """Initialise with an open database connection.

        Args:
            conn: An open sqlite3.Connection with the schema initialised
                (see manuals.db.schema.initialize).
            logger: Logger for write diagnostics; defaults to this module's.
        """
        self._conn = conn
        self._log = logger or logging.getLogger(__name__)
        self._in_transaction = False

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Run the enclosed writes as one ``BEGIN IMMEDIATE`` transaction.

        Commits on normal exit and rolls back if an exception escapes.
        Readers on other connections keep seeing the previous state until
        the commit (WAL mode).
        """
        if self._in_transaction:
            raise RuntimeError("transaction already open on this repository")
        if self._conn.in_transaction:
            self._conn.commit()
        self._conn.execute("BEGIN IMMEDIATE")
        self._in_transaction = True
        try:
            yield
        except BaseException:
            self._conn.rollback()
            raise
        else:
            self._conn.commit()
        finally:
            self._in_transaction = False

    @contextmanager
    def _savepoint(self, name: str) -> Iterator[None]:
        self._conn.execute(f"SAVEPOINT {name}")
        try:
            yield
        except BaseException:
            self._conn.execute(f"ROLLBACK TO SAVEPOINT {name}")
            self._conn.execute(f"RELEASE SAVEPOINT {name}")
            raise
        self._conn.execute(f"RELEASE SAVEPOINT {name}")
        if not self._in_transaction:
            self._conn.commit()

    # ------------------------------------------------------------------
    # Devices
    # ------------------------------------------------------------------

    def upsert_device(self, device: Device) -> None:
        """Insert or replace *device* and its full-text entry.

        The FTS row (name + content + space-joined tags) shares the device's
        rowid, so replacing a device never leaves a stale search entry.

        Raises:
            StorageWriteError: if either row cannot be written; neither is kept.
        """
        try:
            with self._savepoint("upsert_device"):
                self._conn.execute(
                    """
                    INSERT INTO devices (id, domain, type, name, path, content, metadata, indexed_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, COALESCE(?, datetime('now')))
                    ON CONFLICT(id) DO UPDATE SET
                        domain = excluded.domain,
                        type = excluded.type,
                        name = excluded.name,
                        path = excluded.path,
                        content = excluded.content,
                        metadata = excluded.metadata,
                        indexed_at = excluded.indexed_at
                    """,
                    (
                        device.id,
                        device.domain,
                        device.type,
                        device.name,
                        device.path,
                        device.content,
                        device.metadata_json(),
                        device.indexed_at,
                    ),
                )
                rowid = self._conn.execute(
                    "SELECT rowid FROM devices WHERE id = ?", (device.id,)
                ).fetchone()[0]
                # Keep FTS5 in sync with explicit rowid mapping
                self._conn.execute("DELETE FROM search_fts WHERE rowid = ?", (rowid,))
                self._conn.execute(
                    "INSERT INTO search_fts (rowid, device_id, name, content, tags) VALUES (?, ?, ?, ?, ?)",
                    (rowid, device.id, device.name, device.content, " ".join(device.tags)),
                )
        except (sqlite3.Error, TypeError, ValueError) as exc:
            raise StorageWriteError("device", device.id, exc) from exc

    def get_device(self, device_id: str) -> Device | None:
        """Return a device (with content) by ID, or None if not found."""
        row = self._conn.execute(
            f"SELECT {_DEVICE_COLUMNS} FROM devices WHERE id = ?", (device_id,)
        ).fetchone()
        return _row_to_device(row) if row else None

    def list_devices(self, domain: str | None = None) -> list[Device]:
        """Return all devices ordered by name, optionally filtered by domain.

        Content is not loaded; ``Device.content`` is always empty here.
        """
        sql = f"SELECT {_DEVICE_LIST_COLUMNS} FROM devices"
        args: list[object] = []
        if domain is not None:
            sql += " WHERE domain = ?"
            args.append(domain)
        sql += " ORDER BY name, id"
        return [_row_to_device(r) for r in self._conn.execute(sql, args).fetchall()]

    def delete_device(self, device_id: str) -> None:
        """Delete a device; pinouts and specifications cascade, FTS is removed explicitly."""
        with self._savepoint("delete_device"):
            self._conn.execute(
                "DELETE FROM search_fts WHERE rowid IN (SELECT rowid FROM devices WHERE id = ?)",
                (device_id,),
            )
            self._conn.execute("DELETE FROM devices WHERE id = ?", (device_id,))

    def count_devices(self) -> int:
        return self._conn.execute("SELECT COUNT(*) FROM devices").fetchone()[0]

    # ------------------------------------------------------------------
    # Pinouts
    # ------------------------------------------------------------------

    def upsert_pinouts(self, device_id: str, pinouts: list[Pinout]) -> None:
        """Replace the pin rows of *device_id* with *pinouts*.

        Rows are keyed by (device_id, physical_pin); a repeated physical pin
        in *pinouts* keeps the last occurrence.

        Raises:
            StorageWriteError: on failure; the device row is left untouched.
        """
        try:
            with self._savepoint("upsert_pinouts"):
                self._conn.execute("DELETE FROM pinouts WHERE device_id = ?", (device_id,))
                self._conn.executemany(
                    f"""
                    INSERT INTO pinouts (device_id, {_PINOUT_COLUMNS})
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(device_id, physical_pin) DO UPDATE SET
                        gpio_num = excluded.gpio_num,
                        name = excluded.name,
                        default_pull = excluded.default_pull,
                        alt_functions = excluded.alt_functions,
                        description = excluded.description
                    """,
                    [
                        (
                            device_id,
                            p.physical_pin,
                            p.gpio_num,
                            p.name,
                            p.default_pull,
                            json.dumps(p.alt_functions),
                            p.description,
                        )
                        for p in pinouts
                    ],
                )
        except sqlite3.Error as exc:
            raise StorageWriteError("pinouts", device_id, exc) from exc

    def get_pinouts(self, device_id: str) -> list[Pinout]:
        """Return the pinouts of *device_id* ordered by physical pin."""
        rows = self._conn.execute(
            f"SELECT {_PINOUT_COLUMNS} FROM pinouts WHERE device_id = ? ORDER BY physical_pin",
            (device_id,),
        ).fetchall()
        return [_row_to_pinout(r) for r in rows]

    def find_pinouts_by_interface(self, device_id: str, interface: str) -> list[Pinout]:
        """Return pins whose name or alternate functions mention *interface* (e.g. "I2C")."""
        pattern = f"%{interface.lower()}%"
        rows = self._conn.execute(
            f"""
            SELECT {_PINOUT_COLUMNS} FROM pinouts
            WHERE device_id = ?
              AND (LOWER(name) LIKE ? OR LOWER(alt_functions) LIKE ?)
            ORDER BY physical_pin
            """,
            (device_id, pattern, pattern),
        ).fetchall()
        return [_row_to_pinout(r) for r in rows]

    def count_pinouts(self, device_id: str | None = None) -> int:
        if device_id is None:
            return self._conn.execute("SELECT COUNT(*) FROM pinouts").fetchone()[0]
        return self._conn.execute(
            "SELECT COUNT(*) FROM pinouts WHERE device_id = ?", (device_id,)
        ).fetchone()[0]

    # ------------------------------------------------------------------
    # Specifications
    # ------------------------------------------------------------------

    def upsert_specifications(self, device_id: str, specs: list[Specification]) -> None:
        """Replace the specification rows of *device_id*.

        Raises:
            StorageWriteError: on failure; the device row is left untouched.
        """
        try:
            with self._savepoint("upsert_specifications"):
                self._conn.execute(
                    "DELETE FROM specifications WHERE device_id = ?", (device_id,)
                )
                self._conn.executemany(
                    """
                    INSERT INTO specifications (device_id, key, value, unit)
                    VALUES (?, ?, ?, ?)
                    ON CONFLICT(device_id, key) DO UPDATE SET
                        value = excluded.value,
                        unit = excluded.unit
                    """,
                    [(device_id, s.key, s.value, s.unit) for s in specs],
                )
        except sqlite3.Error as exc:
            raise StorageWriteError("specifications", device_id, exc) from exc

    def get_specifications(self, device_id: str) -> list[Specification]:
        rows = self._conn.execute(
            "SELECT key, value, unit FROM specifications WHERE device_id = ? ORDER BY key",
            (device_id,),
        ).fetchall()
        return [Specification(key=r["key"], value=r["value"], unit=r["unit"]) for r in rows]

    # ------------------------------------------------------------------
    # Guides
    # ------------------------------------------------------------------

    def upsert_guide(self, guide: Guide) -> None:
        """Insert or replace a workflow guide."""
        with self._savepoint("upsert_guide"):
            self._conn.execute(
                """
                INSERT INTO guides (id, title, content)
                VALUES (?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    title = excluded.title,
                    content = excluded.content,
                    indexed_at = datetime('now')
                """,
                (guide.id, guide.title, guide.content),
            )

    def get_guide(self, guide_id: str) -> Guide | None:
        row = self._conn.execute(
            "SELECT id, title, content, indexed_at FROM guides WHERE id = ?", (guide_id,)
        ).fetchone()
        if row is None:
            return None
        return Guide(
            id=row["id"], title=row["title"], content=row["content"], indexed_at=row["indexed_at"]
        )

    def list_guides(self) -> list[Guide]:
        """Return all guides (without content) ordered by ID."""
        rows = self._conn.execute(
            "SELECT id, title, indexed_at FROM guides ORDER BY id"
        ).fetchall()
        return [Guide(id=r["id"], title=r["title"], indexed_at=r["indexed_at"]) for r in rows]

    # ------------------------------------------------------------------
    # Bulk clear
    # ------------------------------------------------------------------

    def clear_all(self) -> None:
        """Delete every row from every data table.

        Raises:
            ClearError: if any table cannot be emptied; nothing is deleted.
        """
        try:
            with self._savepoint("clear_all"):
                for table in DATA_TABLES:
                    self._conn.execute(f"DELETE FROM {table}")  # noqa: S608
        except sqlite3.Error as exc:
            raise ClearError(f"failed to clear database: {exc}") from exc
        self._log.debug("cleared tables: %s", ", ".join(DATA_TABLES))

    # ------------------------------------------------------------------
    # FTS5 search
    # ------------------------------------------------------------------

    def search(
        self,
        query: str,
        domain: str | None = None,
        type: str | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> list[SearchResult]:
        """Full-text search over device name, content and tags.

        Results are ordered by FTS5 rank (BM25): lower values are better
        matches. An empty or whitespace-only query returns no results.

        Raises:
            ValueError: on invalid limit, offset or domain.
            SearchQueryError: if FTS5 rejects the built expression.
        """
        opts = SearchOptions(query=query, domain=domain, type=type, limit=limit, offset=offset)
        opts.validate()

        fts_query = build_fts_query(opts.query)
        if not fts_query:
            return []

        sql = """
            SELECT d.id, d.name, d.domain, d.type, d.path, d.metadata,
                   search_fts.rank AS relevance
            FROM search_fts
            JOIN devices d ON d.id = search_fts.device_id
            WHERE search_fts MATCH ?
        """
        args: list[object] = [fts_query]
        if opts.domain is not None:
            sql += " AND d.domain = ?"
            args.append(opts.domain)
        if opts.type is not None:
            sql += " AND d.type = ?"
            args.append(opts.type)
        sql += " ORDER BY search_fts.rank LIMIT ? OFFSET ?"
        args.extend([opts.limit, opts.offset])

        try:
            rows = self._conn.execute(sql, args).fetchall()
        except sqlite3.OperationalError as exc:
            raise SearchQueryError(query, fts_query, exc) from exc

        return [
            SearchResult(
                id=r["id"],
                name=r["name"],
                domain=r["domain"],
                type=r["type"],
                path=r["path"],
                relevance=float(r["relevance"]),
                metadata=json.loads(r["metadata"]),
            )
            for r in rows
        ]

    # ------------------------------------------------------------------
    # Catalogue statistics
    # ------------------------------------------------------------------

    def get_stats(self) -> DatabaseStats:
        row = self._conn.execute(
            """
            SELECT
                (SELECT COUNT(*) FROM devices) AS total_devices,
                (SELECT COUNT(*) FROM devices WHERE domain = 'hardware') AS hardware_count,
                (SELECT COUNT(*) FROM devices WHERE domain = 'software') AS software_count,
                (SELECT COUNT(*) FROM devices WHERE domain = 'protocol') AS protocol_count,
                (SELECT COUNT(*) FROM pinouts) AS total_pinouts,
                (SELECT COUNT(*) FROM specifications) AS total_specs,
                (SELECT COUNT(*) FROM guides) AS total_guides
            """
        ).fetchone()
        return DatabaseStats(**{k: row[k] for k in row.keys()})

    def list_tags(self) -> list[str]:
        """Return every distinct tag across all devices, sorted."""
        rows = self._conn.execute(
            """
            SELECT DISTINCT json_each.value AS tag
            FROM devices, json_each(devices.metadata, '$.tags')
            ORDER BY tag
            """
        ).fetchall()
        return [str(r["tag"]) for r in rows]

    def list_categories(self) -> dict[str, int]:
        """Return {category: device count} for devices that declare a category."""
        return self._count_by_metadata_key("category")

    def list_manufacturers(self) -> dict[str, int]:
        """Return {manufacturer: device count} for devices that declare one."""
        return self._count_by_metadata_key("manufacturer")

    def get_metadata_schema(self) -> dict[str, str | list[str]]:
        """Return the value type(s) seen for each top-level metadata key.

        Types are JSON names (string, number, boolean, array, object). A key
        seen with one type maps to that name, otherwise to a sorted list.
        """
        rows = self._conn.execute(
            """
            SELECT DISTINCT meta.key AS key, meta.type AS type
            FROM devices, json_each(devices.metadata) AS meta
            WHERE meta.type != 'null'
            """
        ).fetchall()
        seen: dict[str, set[str]] = {}
        for r in rows:
            seen.setdefault(r["key"], set()).add(_JSON_TYPE_NAMES.get(r["type"], r["type"]))
        return {
            key: next(iter(types)) if len(types) == 1 else sorted(types)
            for key, types in sorted(seen.items())
        }

    def _count_by_metadata_key(self, key: str) -> dict[str, int]:
        rows = self._conn.execute(
            """
            SELECT json_extract(metadata, ?) AS value, COUNT(*) AS n
            FROM devices
            WHERE json_extract(metadata, ?) IS NOT NULL
            GROUP BY value
            ORDER BY value
            """,
            (f"$.{key}", f"$.{key}"),
        ).fetchall()
        return {str(r["value"]): r["n"] for r in rows}


# ------------------------------------------------------------------
# Row → model helpers
# ------------------------------------------------------------------

def _row_to_device(row: sqlite3.Row) -> Device:
    keys = row.keys()
    return Device(
        id=row["id"],
        domain=row["domain"],
        type=row["type"],
        name=row["name"],
        path=row["path"],
        metadata=json.loads(row["metadata"]),
        content=row["content"] if "content" in keys else "",
        indexed_at=row["indexed_at"],
    )


def _row_to_pinout(row: sqlite3.Row) -> Pinout:
    return Pinout(
        physical_pin=row["physical_pin"],
        gpio_num=row["gpio_num"],
        name=row["name"],
        default_pull=row["default_pull"],
        alt_functions=json.loads(row["alt_functions"] or "[]"),
        description=row["description"],
    )
