"""Manuals configuration loader.

Priority (high → low):
  1. CLI flags           (applied by the caller, not in this module)
  2. Environment variables  (MANUALS_DOCS_PATH, MANUALS_DB_PATH, MANUALS_LOG_*)
  3. Per-project manuals.yaml  (current directory)
  4. Global ~/.manuals/config.yaml
  5. Hardcoded defaults

All YAML reads use yaml.safe_load(), never yaml.load().
"""

from __future__ import annotations

import os
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_GLOBAL_CONFIG_DIR: Path = Path.home() / ".manuals"
_GLOBAL_CONFIG_PATH: Path = _GLOBAL_CONFIG_DIR / "config.yaml"
_PROJECT_CONFIG_NAME: str = "manuals.yaml"

LOG_LEVELS: tuple[str, ...] = ("debug", "info", "warn", "error")
LOG_FORMATS: tuple[str, ...] = ("text", "json")

# Known top-level sections; unknown keys produce a warning
_KNOWN_SECTIONS: frozenset[str] = frozenset(["docs", "db", "log", "search"])


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(ValueError):
    """Raised when a config file contains an invalid value."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class DocsCfg:
    """Documentation source (manuals.yaml: docs:)."""

    path: str | None = None


@dataclass
class DbCfg:
    """SQLite database location (manuals.yaml: db:)."""

    path: str = "./data/manuals.db"


@dataclass
class LogCfg:
    """Logging configuration (manuals.yaml: log:).

    Attributes:
        level: debug | info | warn | error.
        format: text | json.
        output: "stderr", a file path, or a directory ending in "/" that
            receives one dated log file per day.
    """

    level: str = "info"
    format: str = "text"
    output: str = "stderr"


@dataclass
class SearchCfg:
    """Search defaults (manuals.yaml: search:)."""

    default_limit: int = 10
    max_limit: int = 100


@dataclass
class ManualsConfig:
    """Root configuration object, built by load_config() from merged YAML layers."""

    docs: DocsCfg = field(default_factory=DocsCfg)
    db: DbCfg = field(default_factory=DbCfg)
    log: LogCfg = field(default_factory=LogCfg)
    search: SearchCfg = field(default_factory=SearchCfg)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _warn_unknown_keys(data: dict[str, Any], source: Path) -> None:
    """Emit a UserWarning for unrecognised top-level keys."""
    for key in data:
        if key not in _KNOWN_SECTIONS:
            warnings.warn(
                f"Unknown config key '{key}' in '{source}' — ignored.",
                UserWarning,
                stacklevel=4,
            )


def validate(cfg: ManualsConfig) -> None:
    """Raise ConfigError for values no command can work with."""
    if cfg.log.level.lower() not in LOG_LEVELS:
        raise ConfigError(
            f"invalid log level: '{cfg.log.level}' (must be {', '.join(LOG_LEVELS)})"
        )
    if cfg.log.format.lower() not in LOG_FORMATS:
        raise ConfigError(
            f"invalid log format: '{cfg.log.format}' (must be {' or '.join(LOG_FORMATS)})"
        )
    if cfg.search.default_limit < 1 or cfg.search.max_limit < 1:
        raise ConfigError("search.default_limit and search.max_limit must be >= 1")
    if cfg.search.default_limit > cfg.search.max_limit:
        raise ConfigError(
            f"search.default_limit ({cfg.search.default_limit}) exceeds "
            f"search.max_limit ({cfg.search.max_limit})"
        )


# ---------------------------------------------------------------------------
# Merge + build
# ---------------------------------------------------------------------------


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict that is *base* deep-merged with *override*."""
    result = dict(base)
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"config section '{name}' must be a mapping")
    return value


def _cfg_from_dict(data: dict[str, Any]) -> ManualsConfig:
    """Build a *ManualsConfig* from a merged raw YAML dict."""
    cfg = ManualsConfig()

    if "docs" in data:
        d = _section(data, "docs")
        path = d.get("path")
        cfg.docs = DocsCfg(path=str(path) if path else cfg.docs.path)

    if "db" in data:
        b = _section(data, "db")
        cfg.db = DbCfg(path=str(b.get("path", cfg.db.path)))

    if "log" in data:
        lg = _section(data, "log")
        cfg.log = LogCfg(
            level=str(lg.get("level", cfg.log.level)),
            format=str(lg.get("format", cfg.log.format)),
            output=str(lg.get("output", cfg.log.output)),
        )

    if "search" in data:
        s = _section(data, "search")
        try:
            cfg.search = SearchCfg(
                default_limit=int(s.get("default_limit", cfg.search.default_limit)),
                max_limit=int(s.get("max_limit", cfg.search.max_limit)),
            )
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"invalid search limits: {exc}") from exc

    return cfg


def _apply_env_overrides(cfg: ManualsConfig) -> ManualsConfig:
    """Apply MANUALS_* environment variable overrides (layer 2)."""
    if value := os.environ.get("MANUALS_DOCS_PATH"):
        cfg.docs.path = value
    if value := os.environ.get("MANUALS_DB_PATH"):
        cfg.db.path = value
    if value := os.environ.get("MANUALS_LOG_LEVEL"):
        cfg.log.level = value
    if value := os.environ.get("MANUALS_LOG_FORMAT"):
        cfg.log.format = value
    if value := os.environ.get("MANUALS_LOG_OUTPUT"):
        cfg.log.output = value
    return cfg


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in '{path}': {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"config file '{path}' must contain a mapping")
    return data


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    project_dir: Path | None = None,
    *,
    global_config_path: Path | None = None,
) -> ManualsConfig:
    """Load and return a merged *ManualsConfig*.

    Applies layers in order: global → per-project → env vars.
    CLI flag overrides must be applied by the caller after this function.

    Args:
        project_dir: Directory to search for *manuals.yaml*. Defaults to CWD.
        global_config_path: Override the global config path (for testing).

    Returns:
        Fully merged and validated *ManualsConfig*.

    Raises:
        ConfigError: If a config file is not valid YAML or holds invalid values.
    """
    global_path = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    search_dir = project_dir if project_dir is not None else Path.cwd()

    merged: dict[str, Any] = {}

    # Layer 1: global config
    if global_path.exists():
        raw_global = _read_yaml(global_path)
        _warn_unknown_keys(raw_global, global_path)
        merged = _deep_merge(merged, raw_global)

    # Layer 2: per-project config
    project_cfg_path = search_dir / _PROJECT_CONFIG_NAME
    if project_cfg_path.exists():
        raw_project = _read_yaml(project_cfg_path)
        _warn_unknown_keys(raw_project, project_cfg_path)
        merged = _deep_merge(merged, raw_project)

    cfg = _cfg_from_dict(merged)

    # Layer 3: env var overrides
    cfg = _apply_env_overrides(cfg)

    validate(cfg)
    return cfg
