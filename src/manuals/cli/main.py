"""Manuals CLI entry point."""

from __future__ import annotations

import importlib.metadata
from typing import Annotated

import typer

from manuals.cli.guide import guide_cmd
from manuals.cli.index import index_cmd
from manuals.cli.search import search_cmd
from manuals.cli.show import pins_cmd, show_cmd
from manuals.cli.status import status_cmd


def _version() -> str:
    try:
        return importlib.metadata.version("manuals")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"manuals {_version()}")
        raise typer.Exit()


app = typer.Typer(
    name="manuals",
    help=(
        "Manuals — searchable index of hardware, software and protocol docs.\n\n"
        "  manuals index   Build the index from a markdown documentation tree.\n"
        "  manuals search  Full-text search across indexed devices."
    ),
    add_completion=False,
)


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
) -> None:
    """Manuals — searchable documentation index."""


app.command("index")(index_cmd)
app.command("search")(search_cmd)
app.command("show")(show_cmd)
app.command("pins")(pins_cmd)
app.command("status")(status_cmd)
app.command("guide")(guide_cmd)


@app.command("version")
def version_cmd() -> None:
    """Show the installed manuals version."""
    typer.echo(f"manuals {_version()}")


if __name__ == "__main__":
    app()
