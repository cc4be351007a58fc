"""Logging setup for the manuals CLI.

Library modules only ever call ``logging.getLogger(__name__)`` (or use a
logger passed in by the caller); handlers are installed here, once, on the
``manuals`` logger.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import date
from pathlib import Path

from manuals.config import LogCfg

_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

_TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

# Attributes every LogRecord carries; anything else came in through extra=.
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
}

ROOT_LOGGER = "manuals"


class JsonFormatter(logging.Formatter):
    """One JSON object per line, with ``extra=`` fields merged in."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class _StderrHandler(logging.StreamHandler):
    """StreamHandler bound to whatever ``sys.stderr`` is at emit time."""

    def __init__(self) -> None:
        super().__init__(sys.stderr)

    @property
    def stream(self):  # type: ignore[override]
        return sys.stderr

    @stream.setter
    def stream(self, value) -> None:  # type: ignore[override]
        pass


def parse_level(level: str) -> int:
    """Map a config level name to a logging level.

    Raises:
        ValueError: for anything other than debug, info, warn or error.
    """
    try:
        return _LEVELS[level.lower()]
    except KeyError:
        raise ValueError(
            f"invalid log level: {level} (must be debug, info, warn, or error)"
        ) from None


def log_file_for(output: str, today: date | None = None) -> Path | None:
    """Resolve the ``log.output`` setting to a file path (None = stderr only).

    A value ending in "/" is a directory receiving ``manuals-YYYY-MM-DD.log``.
    """
    if not output or output == "stderr":
        return None
    if output.endswith("/"):
        day = today or date.today()
        return Path(output) / f"manuals-{day:%Y-%m-%d}.log"
    return Path(output)


def setup_logging(cfg: LogCfg, today: date | None = None) -> logging.Logger:
    """Install stderr (and optional file) handlers on the ``manuals`` logger.

    Calling it again replaces the handlers from the previous call.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(parse_level(cfg.level))
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter: logging.Formatter
    if cfg.format.lower() == "json":
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(_TEXT_FORMAT)

    handlers: list[logging.Handler] = [_StderrHandler()]
    log_file = log_file_for(cfg.output, today)
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger
