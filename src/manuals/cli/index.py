"""manuals index — (re)build the device index from a documentation tree.

Walks every markdown file under the docs directory, stores devices, pinouts,
specifications and workflow guides, then prints a summary. Per-file failures
are counted, never fatal. Ctrl-C stops the walk after the current file and
keeps what was written.
"""

from __future__ import annotations

import signal
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from manuals.cli.common import console, load_settings, open_db
from manuals.cli.errors import (
    err_clear_failed,
    err_docs_path_missing,
    err_indexer_busy,
    err_no_docs_path,
)
from manuals.db.models import DOMAINS
from manuals.db.repository import Repository
from manuals.errors import ClearError, IndexerBusyError
from manuals.index.indexer import IndexOptions, IndexResult, index_documentation


def index_cmd(
    docs_path: Annotated[
        Path | None,
        typer.Option("--docs-path", "-d", help="Documentation directory to index."),
    ] = None,
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to the index database (created if missing)."),
    ] = None,
    clear: Annotated[
        bool,
        typer.Option("--clear/--no-clear", help="Empty the database before indexing."),
    ] = True,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log every indexed device."),
    ] = False,
) -> None:
    """Index a documentation directory into the search database."""
    cfg = load_settings(db=db, docs_path=docs_path)

    if not cfg.docs.path:
        console.print(err_no_docs_path())
        raise typer.Exit(1)
    docs = Path(cfg.docs.path)
    if not docs.is_dir():
        console.print(err_docs_path_missing(str(docs)))
        raise typer.Exit(1)

    conn = open_db(Path(cfg.db.path), must_exist=False)
    repo = Repository(conn)
    cancel = threading.Event()
    opts = IndexOptions(docs_path=docs, clear=clear, verbose=verbose, cancel=cancel)

    console.print(f"[bold]→ Indexing[/] {docs}  [dim](db: {cfg.db.path})[/]")
    try:
        with _cancel_on_interrupt(cancel):
            result = index_documentation(repo, opts)
    except IndexerBusyError:
        console.print(err_indexer_busy())
        raise typer.Exit(1)
    except ClearError as exc:
        console.print(err_clear_failed(str(exc)))
        raise typer.Exit(1)
    except FileNotFoundError:
        console.print(err_docs_path_missing(str(docs)))
        raise typer.Exit(1)
    finally:
        conn.close()

    _print_summary(result)


@contextmanager
def _cancel_on_interrupt(cancel: threading.Event) -> Iterator[None]:
    """Turn SIGINT into *cancel* for the duration of the block (main thread only)."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return
    previous = signal.signal(signal.SIGINT, lambda signum, frame: cancel.set())
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def _print_summary(result: IndexResult) -> None:
    table = Table(title="Index summary", show_header=False, expand=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Files scanned", str(result.total_files))
    table.add_row("Indexed", f"[green]{result.success_count}[/]")
    errors_style = "red" if result.error_count else "dim"
    table.add_row("Errors", f"[{errors_style}]{result.error_count}[/]")
    for domain in DOMAINS:
        table.add_row(f"  {domain}", str(result.devices_by_domain.get(domain, 0)))
    table.add_row("Guides", str(result.guides_indexed))
    table.add_row("Duration", f"{result.duration:.2f}s")
    console.print(table)

    if result.cancelled:
        console.print("[yellow]⚠ Indexing was cancelled; the index is partial.[/]")
    elif result.error_count:
        console.print("[yellow]Some files failed to index. Re-run with log level debug for details.[/]")
    else:
        console.print("[green]✓[/] Index up to date.")
