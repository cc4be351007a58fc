"""manuals guide — list or read the indexed workflow guides."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.markdown import Markdown
from rich.markup import escape
from rich.table import Table

from manuals.cli.common import console, load_settings, open_db
from manuals.cli.errors import err_guide_not_found
from manuals.db.repository import Repository


def guide_cmd(
    guide_id: Annotated[
        str | None,
        typer.Argument(help="Guide to print: quickstart, workflow, overview or contributing."),
    ] = None,
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to the index database."),
    ] = None,
) -> None:
    """List indexed guides, or print one."""
    cfg = load_settings(db=db)
    conn = open_db(Path(cfg.db.path))
    try:
        repo = Repository(conn)
        if guide_id is None:
            guides = repo.list_guides()
            guide = None
        else:
            guide = repo.get_guide(guide_id)
            guides = repo.list_guides() if guide is None else []
    finally:
        conn.close()

    if guide_id is None:
        if not guides:
            console.print("[dim]No guides indexed. Add QUICKSTART.md or README.md to the docs root.[/]")
            return
        table = Table(title="Guides")
        table.add_column("ID", style="bold")
        table.add_column("Title")
        table.add_column("Indexed", style="dim")
        for g in guides:
            table.add_row(escape(g.id), escape(g.title), g.indexed_at or "")
        console.print(table)
        return

    if guide is None:
        console.print(err_guide_not_found(guide_id, [g.id for g in guides]))
        raise typer.Exit(1)

    console.print(f"[bold]{escape(guide.title)}[/]\n")
    console.print(Markdown(guide.content))
