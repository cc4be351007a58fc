"""CLI test fixtures: isolated config and an indexed docs tree."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from manuals import config
from manuals.cli.main import app

DS18B20 = """\
---
manufacturer: Maxim Integrated
model: DS18B20
category: sensors/temperature
tags: [temperature, 1-wire]
specs:
  accuracy: 0.5 °C
---
# DS18B20

Digital thermometer on a 1-Wire bus.

| Pin | GPIO | Name | Default Pull | Alt Functions | Description |
|-----|------|------|--------------|---------------|-------------|
| 1 | - | GND | - | - | Ground |
| 2 | - | DQ | High | 1-Wire | Data |
| 3 | - | VDD | - | - | Supply |
"""

I2C = """\
---
model: I2C
category: protocols/i2c
---
# I2C

Two-wire serial bus.
"""


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """No global/project config files or MANUALS_* variables leak into CLI tests."""
    for name in (
        "MANUALS_DOCS_PATH",
        "MANUALS_DB_PATH",
        "MANUALS_LOG_LEVEL",
        "MANUALS_LOG_FORMAT",
        "MANUALS_LOG_OUTPUT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config, "_GLOBAL_CONFIG_PATH", tmp_path / "no-global.yaml")
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def docs(tmp_path: Path) -> Path:
    root = tmp_path / "docs"
    (root / "sensors").mkdir(parents=True)
    (root / "protocols").mkdir()
    (root / "sensors" / "ds18b20.md").write_text(DS18B20, encoding="utf-8")
    (root / "protocols" / "i2c.md").write_text(I2C, encoding="utf-8")
    (root / "QUICKSTART.md").write_text("# Quick start\n\nRun manuals index.\n", encoding="utf-8")
    return root


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "manuals.db"


@pytest.fixture
def indexed_db(runner: CliRunner, docs: Path, db_path: Path) -> Path:
    result = runner.invoke(app, ["index", "--docs-path", str(docs), "--db", str(db_path)])
    assert result.exit_code == 0, result.output
    return db_path
