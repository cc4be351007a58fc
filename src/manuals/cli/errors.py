"""Manuals rich error messages — actionable feedback.

Every error shown to the user must contain:
  1. What went wrong (clear cause)
  2. The exact action the user should take to fix it

Usage:
    from manuals.cli.errors import err_no_db
    console.print(err_no_db("./data/manuals.db"))
    raise typer.Exit(1)
"""

from __future__ import annotations

from rich.markup import escape


def err_no_db(db_path: str) -> str:
    """No index database at *db_path*."""
    return (
        f"[red]Error:[/] No database found at '{escape(db_path)}'.\n"
        "  Run:  manuals index --docs-path <docs-dir>"
    )


def err_no_docs_path() -> str:
    """Neither --docs-path, MANUALS_DOCS_PATH nor docs.path is set."""
    return (
        "[red]Error:[/] No documentation directory configured.\n"
        "  Pass:  manuals index --docs-path <docs-dir>\n"
        "  Or set MANUALS_DOCS_PATH, or docs.path in manuals.yaml"
    )


def err_docs_path_missing(docs_path: str) -> str:
    """Configured docs path does not exist or is not a directory."""
    return (
        f"[red]Error:[/] Documentation directory not found: '{escape(docs_path)}'\n"
        "  Check the path, or point --docs-path at an existing directory."
    )


def err_indexer_busy() -> str:
    """Another reindex holds the indexer lock."""
    return (
        "[red]Error:[/] Another indexing run is already in progress.\n"
        "  Wait for it to finish, then run:  manuals index"
    )


def err_clear_failed(detail: str) -> str:
    """The database could not be emptied before a full reindex."""
    return (
        f"[red]Error:[/] Failed to clear the database: {escape(detail)}\n"
        "  The previous index was kept. Retry, or reindex without clearing:\n"
        "    manuals index --no-clear"
    )


def err_config(detail: str) -> str:
    """A config file or MANUALS_* variable holds an invalid value."""
    return (
        f"[red]Error:[/] Invalid configuration: {escape(detail)}\n"
        "  Fix manuals.yaml, ~/.manuals/config.yaml or the MANUALS_* variables."
    )


def err_invalid_query(query: str, detail: str) -> str:
    """The full-text engine rejected the search expression."""
    return (
        f"[red]Error:[/] Invalid search query '{escape(query)}'.\n"
        f"  {escape(detail)}\n"
        "  Remove special characters, or quote exact phrases: \"esp32-s3\""
    )


def err_invalid_option(detail: str) -> str:
    """A search option (limit, offset, domain) is out of range."""
    return (
        f"[red]Error:[/] {escape(detail)}\n"
        "  Run:  manuals search --help  for valid values."
    )


def err_device_not_found(device_id: str) -> str:
    """No device with *device_id* in the index."""
    return (
        f"[yellow]Device not found:[/] '{escape(device_id)}' is not in the index.\n"
        "  Run:  manuals search <query>  to find device IDs."
    )


def err_guide_not_found(guide_id: str, available: list[str]) -> str:
    """No guide with *guide_id*; list the ones that exist."""
    available_list = ", ".join(available) if available else "(none indexed)"
    return (
        f"[yellow]Guide not found:[/] '{escape(guide_id)}'.\n"
        f"  Available guides: {available_list}\n"
        "  Run:  manuals guide  to list them."
    )
