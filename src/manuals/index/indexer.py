"""Documentation indexing orchestrator.

Walks a docs tree, parses every markdown file and writes device, pinout and
specification records through the Repository. One bad file never stops the
run: parse and device-write failures are logged and counted, pinout and
specification failures are logged as warnings only.

A run with ``clear=True`` executes clear + repopulate inside one
transaction, so readers keep the previous index until it commits. Setting
``cancel`` stops the walk before the next file; what was written so far is
kept (partial index).
"""

from __future__ import annotations

import logging
import os
import sqlite3
import threading
import time
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from manuals.db.models import DOMAINS, HARDWARE, Device, Guide
from manuals.db.repository import Repository
from manuals.errors import IndexerBusyError, ManualsError, StorageWriteError
from manuals.index.parser import ParsedDocument, parse_markdown_file

MARKDOWN_EXTENSIONS: frozenset[str] = frozenset({".md", ".markdown"})

# (guide id, file name at the docs root, title)
GUIDES: tuple[tuple[str, str, str], ...] = (
    ("quickstart", "QUICKSTART.md", "Quick Start Guide"),
    ("workflow", "WORKFLOW_ADD_HARDWARE.md", "Add Hardware Workflow"),
    ("overview", "README.md", "Repository Overview"),
    ("contributing", "CONTRIBUTING.md", "Contributing Guide"),
)

# One reindex at a time per process.
_REINDEX_LOCK = threading.Lock()

_log = logging.getLogger(__name__)


@dataclass
class IndexOptions:
    docs_path: Path
    clear: bool = False
    verbose: bool = False
    cancel: threading.Event | None = None


@dataclass
class IndexResult:
    total_files: int = 0
    success_count: int = 0
    error_count: int = 0
    duration: float = 0.0  # seconds
    devices_by_domain: dict[str, int] = field(
        default_factory=lambda: {domain: 0 for domain in DOMAINS}
    )
    guides_indexed: int = 0
    cancelled: bool = False


@dataclass
class ParseOutcome:
    """Result of parsing one file: exactly one of *document* / *error* is set."""

    document: ParsedDocument | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.document is not None


# ------------------------------------------------------------------
# Walking
# ------------------------------------------------------------------


def is_markdown(path: Path) -> bool:
    return path.suffix.lower() in MARKDOWN_EXTENSIONS


def iter_markdown_files(docs_path: Path, logger: logging.Logger | None = None) -> Iterator[Path]:
    """Yield markdown files under *docs_path* in a stable (sorted) order.

    Unreadable directories are logged and skipped.
    """
    log = logger or _log

    def _on_error(exc: OSError) -> None:
        log.warning("failed to access path %s: %s", getattr(exc, "filename", "?"), exc)

    for root, dirs, files in os.walk(docs_path, onerror=_on_error):
        dirs.sort()
        for name in sorted(files):
            path = Path(root) / name
            if is_markdown(path) and path.is_file():
                yield path


def parse_outcome(path: Path, logger: logging.Logger | None = None) -> ParseOutcome:
    """Parse one file, capturing a read or parse failure instead of raising."""
    try:
        return ParseOutcome(document=parse_markdown_file(path, logger=logger or _log))
    except (ManualsError, ValueError) as exc:
        return ParseOutcome(error=exc)


# ------------------------------------------------------------------
# Orchestration
# ------------------------------------------------------------------


def index_documentation(
    repo: Repository, opts: IndexOptions, logger: logging.Logger | None = None
) -> IndexResult:
    """Index every markdown file under ``opts.docs_path`` into *repo*.

    Returns:
        Aggregate counts and elapsed time for the run.

    Raises:
        FileNotFoundError: if ``opts.docs_path`` is not a directory.
        IndexerBusyError: if another reindex is running in this process.
        ClearError: if ``opts.clear`` is set and the database cannot be emptied.
    """
    log = logger or _log
    docs_path = Path(opts.docs_path)
    if not docs_path.is_dir():
        raise FileNotFoundError(f"docs path is not a directory: {docs_path}")

    if not _REINDEX_LOCK.acquire(blocking=False):
        raise IndexerBusyError("another indexing run is already in progress")
    try:
        if opts.clear:
            with repo.transaction():
                log.info("clearing existing database")
                repo.clear_all()
                return _run(repo, docs_path, opts, log)
        return _run(repo, docs_path, opts, log)
    finally:
        _REINDEX_LOCK.release()


def _run(repo: Repository, docs_path: Path, opts: IndexOptions, log: logging.Logger) -> IndexResult:
    start = time.monotonic()
    result = IndexResult()
    log.info("scanning documentation directory %s", docs_path)

    for path in iter_markdown_files(docs_path, logger=log):
        if opts.cancel is not None and opts.cancel.is_set():
            result.cancelled = True
            log.warning("indexing cancelled after %d files", result.total_files)
            break

        outcome = parse_outcome(path, logger=log)
        result.total_files += 1
        if not outcome.ok:
            log.warning("failed to parse file %s: %s", path, outcome.error)
            result.error_count += 1
            continue

        if _store(repo, path, outcome.document, opts, log):
            result.success_count += 1
            result.devices_by_domain[outcome.document.domain] += 1
        else:
            result.error_count += 1

    if not result.cancelled:
        result.guides_indexed = index_guides(repo, docs_path, logger=log)

    result.duration = time.monotonic() - start
    log.info(
        "indexing complete: %d files, %d indexed, %d errors in %.2fs",
        result.total_files,
        result.success_count,
        result.error_count,
        result.duration,
        extra={
            "total_files": result.total_files,
            "success": result.success_count,
            "errors": result.error_count,
            **result.devices_by_domain,
            "guides": result.guides_indexed,
            "duration_ms": int(result.duration * 1000),
        },
    )
    return result


def _store(
    repo: Repository, path: Path, doc: ParsedDocument, opts: IndexOptions, log: logging.Logger
) -> bool:
    """Write one parsed document. Returns False if the device row failed."""
    device = Device(
        id=doc.id,
        domain=doc.domain,
        type=doc.type,
        name=doc.name,
        path=str(path),
        metadata=doc.metadata,
        content=doc.content,
        indexed_at=datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S"),
    )
    try:
        repo.upsert_device(device)
    except StorageWriteError as exc:
        log.warning("failed to insert device %s from %s: %s", device.id, path, exc)
        return False

    if doc.domain == HARDWARE:
        try:
            repo.upsert_pinouts(device.id, doc.pinouts)
        except StorageWriteError as exc:
            # The device row stands.
            log.warning("failed to insert pinouts for %s: %s", device.id, exc)

    try:
        repo.upsert_specifications(device.id, doc.specifications)
    except StorageWriteError as exc:
        log.warning("failed to insert specifications for %s: %s", device.id, exc)

    if opts.verbose:
        log.info(
            "indexed device %s (%s, %s/%s, %d pinouts)",
            device.id, device.name, device.domain, device.type, len(doc.pinouts),
        )
    return True


def index_guides(repo: Repository, docs_path: Path, logger: logging.Logger | None = None) -> int:
    """Store the well-known workflow guides found at the docs root.

    Missing guides are skipped; read or write failures are logged only.
    """
    log = logger or _log
    count = 0
    for guide_id, filename, title in GUIDES:
        path = docs_path / filename
        if not path.is_file():
            log.debug("guide file not found, skipping: %s", filename)
            continue
        try:
            content = path.read_text(encoding="utf-8-sig", errors="replace")
            repo.upsert_guide(Guide(id=guide_id, title=title, content=content))
        except (OSError, sqlite3.Error) as exc:
            log.warning("failed to index guide %s: %s", guide_id, exc)
            continue
        count += 1
    return count
