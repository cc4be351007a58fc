"""Tests for the manuals search command."""

from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from manuals.cli.main import app


def test_search_finds_device(runner: CliRunner, indexed_db: Path) -> None:
    result = runner.invoke(app, ["search", "thermometer", "--db", str(indexed_db)])
    assert result.exit_code == 0, result.output
    assert "sensors-temperature-ds18b20" in result.output
    assert "DS18B20" in result.output


def test_search_hyphenated_query(runner: CliRunner, indexed_db: Path) -> None:
    result = runner.invoke(app, ["search", "1-wire", "--db", str(indexed_db)])
    assert result.exit_code == 0, result.output
    assert "sensors-temperature-ds18b20" in result.output


def test_search_domain_filter(runner: CliRunner, indexed_db: Path) -> None:
    result = runner.invoke(
        app, ["search", "bus", "--domain", "protocol", "--db", str(indexed_db)]
    )
    assert result.exit_code == 0, result.output
    assert "protocols-i2c-i2c" in result.output
    assert "ds18b20" not in result.output.lower()


def test_search_no_results(runner: CliRunner, indexed_db: Path) -> None:
    result = runner.invoke(app, ["search", "zigbee", "--db", str(indexed_db)])
    assert result.exit_code == 0
    assert "No results" in result.output


def test_search_without_db_fails(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(app, ["search", "x", "--db", str(tmp_path / "missing.db")])
    assert result.exit_code == 1
    assert "No database found" in result.output
    assert not (tmp_path / "missing.db").exists()


def test_search_invalid_domain(runner: CliRunner, indexed_db: Path) -> None:
    result = runner.invoke(
        app, ["search", "x", "--domain", "firmware", "--db", str(indexed_db)]
    )
    assert result.exit_code == 1
    assert "unknown domain" in result.output


def test_search_limit_above_max(runner: CliRunner, indexed_db: Path) -> None:
    result = runner.invoke(app, ["search", "x", "--limit", "101", "--db", str(indexed_db)])
    assert result.exit_code == 1
    assert "limit must be <= 100" in result.output


def test_search_unbalanced_quote_reports_invalid_query(runner: CliRunner, indexed_db: Path) -> None:
    result = runner.invoke(app, ["search", '"thermometer', "--db", str(indexed_db)])
    assert result.exit_code == 1
    assert "Invalid search query" in result.output
