"""manuals show / manuals pins — inspect one indexed device."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from manuals.cli.common import console, load_settings, open_db
from manuals.cli.errors import err_device_not_found
from manuals.db.models import Device, Pinout, Specification
from manuals.db.repository import Repository


def show_cmd(
    device_id: Annotated[str, typer.Argument(help="Device ID, e.g. sensors-temperature-ds18b20.")],
    content: Annotated[
        bool,
        typer.Option("--content", help="Also render the documentation body."),
    ] = False,
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to the index database."),
    ] = None,
) -> None:
    """Show a device: metadata, pinout table and specifications."""
    cfg = load_settings(db=db)
    conn = open_db(Path(cfg.db.path))
    try:
        repo = Repository(conn)
        device = repo.get_device(device_id)
        if device is None:
            console.print(err_device_not_found(device_id))
            raise typer.Exit(1)
        pinouts = repo.get_pinouts(device_id)
        specs = repo.get_specifications(device_id)
    finally:
        conn.close()

    _show_device_panel(device)
    if pinouts:
        console.print(_pinout_table(pinouts, title="Pinout"))
    if specs:
        console.print(_spec_table(specs))
    if content and device.content:
        console.print(Panel(Markdown(device.content), title="[bold]Documentation[/]"))


def pins_cmd(
    device_id: Annotated[str, typer.Argument(help="Device ID.")],
    interface: Annotated[
        str | None,
        typer.Option("--interface", "-i", help="Only pins for this interface, e.g. I2C, SPI, UART."),
    ] = None,
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to the index database."),
    ] = None,
) -> None:
    """List a device's pins, optionally filtered by interface."""
    cfg = load_settings(db=db)
    conn = open_db(Path(cfg.db.path))
    try:
        repo = Repository(conn)
        if repo.get_device(device_id) is None:
            console.print(err_device_not_found(device_id))
            raise typer.Exit(1)
        if interface:
            pinouts = repo.find_pinouts_by_interface(device_id, interface)
        else:
            pinouts = repo.get_pinouts(device_id)
    finally:
        conn.close()

    if not pinouts:
        what = f" matching '{escape(interface)}'" if interface else ""
        console.print(f"[yellow]No pins{what}[/] for '{escape(device_id)}'.")
        return

    title = f"{device_id} pins" + (f" ({interface})" if interface else "")
    console.print(_pinout_table(pinouts, title=escape(title)))


# ---------------------------------------------------------------------------
# Renderers
# ---------------------------------------------------------------------------


def _show_device_panel(device: Device) -> None:
    lines = [
        f"Name:      [bold]{escape(device.name)}[/]",
        f"ID:        {escape(device.id)}",
        f"Domain:    {device.domain}",
        f"Type:      {escape(device.type)}",
        f"Path:      [dim]{escape(device.path)}[/]",
    ]
    for key in ("manufacturer", "version", "date"):
        value = device.metadata.get(key)
        if value:
            lines.append(f"{key.capitalize() + ':':<10} {escape(str(value))}")
    if device.tags:
        lines.append(f"Tags:      {escape(', '.join(device.tags))}")
    related = device.metadata.get("related_hardware")
    if isinstance(related, list) and related:
        lines.append(f"Related:   {escape(', '.join(related))}")
    if device.indexed_at:
        lines.append(f"Indexed:   [dim]{device.indexed_at}[/]")
    console.print(Panel("\n".join(lines), title="[bold]Device[/]", expand=False))


def _pinout_table(pinouts: list[Pinout], title: str) -> Table:
    table = Table(title=title)
    table.add_column("Pin", justify="right", style="bold")
    table.add_column("GPIO", justify="right")
    table.add_column("Name")
    table.add_column("Pull")
    table.add_column("Alt functions")
    table.add_column("Description")
    for p in pinouts:
        table.add_row(
            str(p.physical_pin),
            "-" if p.gpio_num is None else str(p.gpio_num),
            escape(p.name),
            p.default_pull or "-",
            escape(", ".join(p.alt_functions)) or "-",
            escape(p.description or ""),
        )
    return table


def _spec_table(specs: list[Specification]) -> Table:
    table = Table(title="Specifications")
    table.add_column("Key", style="bold")
    table.add_column("Value")
    for s in specs:
        value = f"{s.value} {s.unit}" if s.unit else s.value
        table.add_row(escape(s.key), escape(value))
    return table
