"""Helpers shared by the manuals commands: config, logging and DB access."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import typer
from rich.console import Console

from manuals.cli.errors import err_config, err_no_db
from manuals.config import ConfigError, ManualsConfig, load_config
from manuals.db.connection import Database
from manuals.db.schema import initialize
from manuals.log import setup_logging

console = Console()


def load_settings(db: Path | None = None, docs_path: Path | None = None) -> ManualsConfig:
    """Load layered config, apply CLI flag overrides and configure logging.

    Exits with status 1 on invalid configuration.
    """
    try:
        cfg = load_config()
        if db is not None:
            cfg.db.path = str(db)
        if docs_path is not None:
            cfg.docs.path = str(docs_path)
        setup_logging(cfg.log)
    except (ConfigError, ValueError, OSError) as exc:
        console.print(err_config(str(exc)))
        raise typer.Exit(1) from exc
    return cfg


def open_db(db_path: Path, *, must_exist: bool = True) -> sqlite3.Connection:
    """Open (and migrate) the index database.

    With *must_exist*, a missing file is reported instead of created.
    """
    if must_exist and not db_path.exists():
        console.print(err_no_db(str(db_path)))
        raise typer.Exit(1)
    conn = Database(db_path).connect()
    initialize(conn)
    return conn
