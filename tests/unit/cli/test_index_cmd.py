"""Tests for the manuals index command."""

from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from manuals.cli.main import app
from manuals.db.connection import Database
from manuals.db.repository import Repository
from manuals.index import indexer


def _repo(db_path: Path) -> Repository:
    return Repository(Database(db_path).connect())


def test_index_builds_database(runner: CliRunner, docs: Path, db_path: Path) -> None:
    result = runner.invoke(app, ["index", "--docs-path", str(docs), "--db", str(db_path)])
    assert result.exit_code == 0, result.output
    assert "Index summary" in result.output
    assert "Files scanned" in result.output
    assert db_path.exists()

    repo = _repo(db_path)
    assert repo.count_devices() == 3  # two devices + QUICKSTART.md as an unclassified page
    assert repo.count_pinouts("sensors-temperature-ds18b20") == 3
    assert repo.get_guide("quickstart") is not None


def test_index_docs_path_from_env(
    runner: CliRunner, docs: Path, db_path: Path, monkeypatch
) -> None:
    monkeypatch.setenv("MANUALS_DOCS_PATH", str(docs))
    result = runner.invoke(app, ["index", "--db", str(db_path)])
    assert result.exit_code == 0, result.output
    assert _repo(db_path).get_device("protocols-i2c-i2c") is not None


def test_index_docs_path_from_project_config(
    runner: CliRunner, docs: Path, db_path: Path, tmp_path: Path
) -> None:
    (tmp_path / "manuals.yaml").write_text(
        f"docs:\n  path: {docs}\ndb:\n  path: {db_path}\n", encoding="utf-8"
    )
    result = runner.invoke(app, ["index"])
    assert result.exit_code == 0, result.output
    assert db_path.exists()


def test_index_without_docs_path_fails(runner: CliRunner, db_path: Path) -> None:
    result = runner.invoke(app, ["index", "--db", str(db_path)])
    assert result.exit_code == 1
    assert "No documentation directory configured" in result.output


def test_index_missing_docs_dir_fails(runner: CliRunner, tmp_path: Path, db_path: Path) -> None:
    result = runner.invoke(
        app, ["index", "--docs-path", str(tmp_path / "nope"), "--db", str(db_path)]
    )
    assert result.exit_code == 1
    assert "not found" in result.output


def test_index_no_clear_keeps_removed_files(
    runner: CliRunner, docs: Path, indexed_db: Path
) -> None:
    (docs / "protocols" / "i2c.md").unlink()
    result = runner.invoke(
        app, ["index", "--docs-path", str(docs), "--db", str(indexed_db), "--no-clear"]
    )
    assert result.exit_code == 0, result.output
    assert _repo(indexed_db).get_device("protocols-i2c-i2c") is not None


def test_index_clear_drops_removed_files(
    runner: CliRunner, docs: Path, indexed_db: Path
) -> None:
    (docs / "protocols" / "i2c.md").unlink()
    result = runner.invoke(app, ["index", "--docs-path", str(docs), "--db", str(indexed_db)])
    assert result.exit_code == 0, result.output
    assert _repo(indexed_db).get_device("protocols-i2c-i2c") is None


def test_index_busy_fails(runner: CliRunner, docs: Path, db_path: Path) -> None:
    assert indexer._REINDEX_LOCK.acquire(blocking=False)
    try:
        result = runner.invoke(app, ["index", "--docs-path", str(docs), "--db", str(db_path)])
    finally:
        indexer._REINDEX_LOCK.release()
    assert result.exit_code == 1
    assert "already in progress" in result.output
