"""Tests for logging setup."""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path

import pytest

from manuals.config import LogCfg
from manuals.log import JsonFormatter, log_file_for, parse_level, setup_logging


@pytest.fixture
def manuals_logger():
    logger = logging.getLogger("manuals")
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


@pytest.mark.parametrize(
    "name, level",
    [
        ("debug", logging.DEBUG),
        ("info", logging.INFO),
        ("warn", logging.WARNING),
        ("WARNING", logging.WARNING),
        ("error", logging.ERROR),
    ],
)
def test_parse_level(name, level):
    assert parse_level(name) == level


def test_parse_level_invalid():
    with pytest.raises(ValueError, match="invalid log level"):
        parse_level("loud")


def test_log_file_for_stderr():
    assert log_file_for("stderr") is None
    assert log_file_for("") is None


def test_log_file_for_file():
    assert log_file_for("/var/log/manuals.log") == Path("/var/log/manuals.log")


def test_log_file_for_directory():
    path = log_file_for("/var/log/manuals/", today=date(2025, 1, 31))
    assert path == Path("/var/log/manuals/manuals-2025-01-31.log")


def test_json_formatter_includes_extra_fields():
    record = logging.LogRecord("manuals.index", logging.INFO, __file__, 1, "done %d", (3,), None)
    record.total_files = 3
    payload = json.loads(JsonFormatter().format(record))
    assert payload["msg"] == "done 3"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "manuals.index"
    assert payload["total_files"] == 3
    assert "args" not in payload


def test_setup_logging_sets_level(manuals_logger):
    setup_logging(LogCfg(level="warn"))
    assert manuals_logger.level == logging.WARNING
    assert len(manuals_logger.handlers) == 1


def test_setup_logging_replaces_handlers(manuals_logger):
    setup_logging(LogCfg())
    setup_logging(LogCfg())
    assert len(manuals_logger.handlers) == 1


def test_setup_logging_writes_dated_file(manuals_logger, tmp_path: Path):
    out_dir = tmp_path / "logs"
    setup_logging(LogCfg(level="info", format="json", output=f"{out_dir}/"), today=date(2025, 6, 1))
    logging.getLogger("manuals.test").info("hello", extra={"device_id": "x"})
    for handler in manuals_logger.handlers:
        handler.flush()

    log_file = out_dir / "manuals-2025-06-01.log"
    line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
    payload = json.loads(line)
    assert payload["msg"] == "hello"
    assert payload["device_id"] == "x"


def test_setup_logging_text_file(manuals_logger, tmp_path: Path):
    log_file = tmp_path / "manuals.log"
    setup_logging(LogCfg(level="debug", output=str(log_file)))
    logging.getLogger("manuals.test").debug("parsed %s", "a.md")
    for handler in manuals_logger.handlers:
        handler.flush()
    text = log_file.read_text(encoding="utf-8")
    assert "DEBUG" in text
    assert "manuals.test: parsed a.md" in text
