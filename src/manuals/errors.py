"""Exception hierarchy for the manuals indexer and search layer.

Only ``ClearError``, ``SearchQueryError`` and ``IndexerBusyError`` ever reach
callers of ``index_documentation`` / ``Repository.search``. The others are
raised internally and folded into counters or log records by the indexer.
"""

from __future__ import annotations


class ManualsError(Exception):
    """Base class for all manuals errors."""


class FileAccessError(ManualsError):
    """A path under the docs tree could not be read."""

    def __init__(self, path: str, cause: BaseException | None = None) -> None:
        self.path = path
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"cannot read '{path}'{detail}")


class ParseError(ManualsError):
    """Frontmatter block is malformed. Callers recover by treating it as body."""


class StorageWriteError(ManualsError):
    """A device, pinout or specification row could not be written."""

    def __init__(self, what: str, device_id: str, cause: BaseException | None = None) -> None:
        self.what = what
        self.device_id = device_id
        self.cause = cause
        super().__init__(f"failed to write {what} for '{device_id}': {cause}")


class ClearError(ManualsError):
    """Emptying the database before a destructive reindex failed."""


class SearchQueryError(ManualsError, ValueError):
    """The full-text engine rejected a query expression."""

    def __init__(self, query: str, fts_query: str, cause: BaseException | None = None) -> None:
        self.query = query
        self.fts_query = fts_query
        super().__init__(f"invalid search query {query!r} (fts: {fts_query!r}): {cause}")


class IndexerBusyError(ManualsError):
    """Another reindex is already running in this process."""
