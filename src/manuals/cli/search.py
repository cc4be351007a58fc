"""manuals search — full-text search over indexed devices."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from manuals.cli.common import console, load_settings, open_db
from manuals.cli.errors import err_invalid_option, err_invalid_query
from manuals.db.repository import Repository
from manuals.errors import SearchQueryError
from manuals.search import SearchOptions


def search_cmd(
    query: Annotated[str, typer.Argument(help="Search terms, e.g. 'esp32-s3' or 'analog sensor'.")],
    domain: Annotated[
        str | None,
        typer.Option("--domain", help="Restrict to hardware, software or protocol."),
    ] = None,
    type_: Annotated[
        str | None,
        typer.Option("--type", help="Restrict to a device type, e.g. 'temperature'."),
    ] = None,
    limit: Annotated[
        int | None,
        typer.Option("--limit", "-n", help="Maximum number of results (default from config)."),
    ] = None,
    offset: Annotated[
        int,
        typer.Option("--offset", help="Skip this many results."),
    ] = 0,
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to the index database."),
    ] = None,
) -> None:
    """Search devices by name, content and tags (best matches first)."""
    cfg = load_settings(db=db)

    opts = SearchOptions(
        query=query,
        domain=domain,
        type=type_,
        limit=limit if limit is not None else cfg.search.default_limit,
        offset=offset,
    )
    try:
        opts.validate(max_limit=cfg.search.max_limit)
    except ValueError as exc:
        console.print(err_invalid_option(str(exc)))
        raise typer.Exit(1)

    conn = open_db(Path(cfg.db.path))
    try:
        results = Repository(conn).search(
            opts.query, domain=opts.domain, type=opts.type, limit=opts.limit, offset=opts.offset
        )
    except SearchQueryError as exc:
        console.print(err_invalid_query(query, str(exc.__cause__ or exc)))
        raise typer.Exit(1)
    finally:
        conn.close()

    if not results:
        console.print(f"[yellow]No results[/] for '{escape(query)}'.")
        return

    table = Table(title=f"Results for '{escape(query)}'")
    table.add_column("ID", style="bold", no_wrap=True)
    table.add_column("Name")
    table.add_column("Domain")
    table.add_column("Type")
    table.add_column("Score", justify="right", style="dim")
    for r in results:
        table.add_row(
            escape(r.id),
            escape(r.name),
            r.domain,
            escape(r.type),
            f"{r.relevance:.2f}",
        )
    console.print(table)
