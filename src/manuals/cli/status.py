"""manuals status command.

Shows the index overview: database location and size, device counts per
domain, pinouts, specifications and guides, plus the tag, category and
manufacturer catalogue.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from manuals.cli.common import console, load_settings, open_db
from manuals.db.repository import Repository
from manuals.db.schema import CURRENT_VERSION

_TOP_N = 10


def status_cmd(
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to the index database."),
    ] = None,
) -> None:
    """Show index statistics and the device catalogue."""
    cfg = load_settings(db=db)
    db_path = Path(cfg.db.path)

    if not db_path.exists():
        console.print(
            Panel(
                f"[yellow]No database found at '{escape(str(db_path))}'.[/]\n"
                "  Run:  manuals index --docs-path <docs-dir>",
                title="[bold]Index[/]",
                expand=False,
            )
        )
        return

    conn = open_db(db_path)
    try:
        repo = Repository(conn)
        stats = repo.get_stats()
        tags = repo.list_tags()
        categories = repo.list_categories()
        manufacturers = repo.list_manufacturers()
    finally:
        conn.close()

    size_mb = db_path.stat().st_size / (1024 * 1024)
    lines = [
        f"Database:  {escape(str(db_path))} ({size_mb:.1f} MB, schema v{CURRENT_VERSION})",
        f"Devices:   [bold]{stats.total_devices}[/]  "
        f"(hardware {stats.hardware_count} | software {stats.software_count} | "
        f"protocol {stats.protocol_count})",
        f"Pinouts:   [bold]{stats.total_pinouts}[/]  |  "
        f"Specs: [bold]{stats.total_specs}[/]  |  "
        f"Guides: [bold]{stats.total_guides}[/]",
    ]
    if cfg.docs.path:
        lines.append(f"Docs:      [dim]{escape(cfg.docs.path)}[/]")
    if not stats.total_devices:
        lines.append("[dim]Index is empty. Run:  manuals index[/]")
    console.print(Panel("\n".join(lines), title="[bold]Index[/]", expand=False))

    if categories:
        console.print(_count_table("Categories", "Category", categories))
    if manufacturers:
        console.print(_count_table("Manufacturers", "Manufacturer", manufacturers))
    if tags:
        shown = ", ".join(tags[:_TOP_N * 3])
        more = f"  [dim](+{len(tags) - _TOP_N * 3} more)[/]" if len(tags) > _TOP_N * 3 else ""
        console.print(f"[bold]Tags ({len(tags)}):[/] {escape(shown)}{more}")


def _count_table(title: str, column: str, counts: dict[str, int]) -> Table:
    table = Table(title=title, expand=False)
    table.add_column(column, style="bold")
    table.add_column("Devices", justify="right")
    top = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))[:_TOP_N]
    for name, n in top:
        table.add_row(escape(name), str(n))
    if len(counts) > _TOP_N:
        table.add_row(f"[dim]… {len(counts) - _TOP_N} more[/]", "")
    return table
