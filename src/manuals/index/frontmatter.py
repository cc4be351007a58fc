"""YAML frontmatter extraction and metadata normalization.

A document may open with a block delimited by ``---`` lines::

    ---
    manufacturer: Maxim
    model: DS18B20
    category: sensors/temperature
    tags: [temperature, 1-wire]
    ---
    # DS18B20 ...

Unterminated or malformed blocks never fail a parse: the whole text is kept
as body and the metadata is empty.
"""

from __future__ import annotations

import datetime as dt
import logging
import math
from typing import Any

import yaml

from manuals.db.models import Metadata, MetadataValue
from manuals.errors import ParseError

_DELIMITER = "---"

# Recognised frontmatter keys, by normalized shape.
STRING_FIELDS: tuple[str, ...] = ("manufacturer", "model", "category", "version", "date")
LIST_FIELDS: tuple[str, ...] = ("tags", "datasheets", "related_hardware")
MAP_FIELDS: tuple[str, ...] = ("specs",)

_log = logging.getLogger(__name__)

_TYPED_SCALAR_TAGS = frozenset(
    "tag:yaml.org,2002:" + name for name in ("bool", "int", "float", "timestamp")
)


class _TextLoader(yaml.SafeLoader):
    """SafeLoader that keeps plain scalars as written ("0755", "1.10", "yes").

    Only ``~``/``null`` still resolve, to None.
    """


_TextLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag not in _TYPED_SCALAR_TAGS]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def split_frontmatter(text: str) -> tuple[str, str]:
    """Split *text* into (raw metadata block, body).

    The first line must be exactly ``---``; the block ends at the next line
    starting with ``---``. Without both delimiters the block is empty and
    the body is *text* unchanged.
    """
    found = _locate_frontmatter(text)
    if found is None:
        return "", text
    return found


def _locate_frontmatter(text: str) -> tuple[str, str] | None:
    first_nl = text.find("\n")
    if first_nl == -1 or text[:first_nl].rstrip("\r") != _DELIMITER:
        return None

    # Search from the opening newline so an empty block ("---\n---") closes.
    close = text.find("\n" + _DELIMITER, first_nl)
    if close == -1:
        return None

    block = text[first_nl + 1 : close]
    body = text[close + 1 + len(_DELIMITER) :].strip()
    return block, body


def load_frontmatter(block: str) -> dict[str, Any]:
    """Parse a raw YAML block into a dict.

    String and list fields keep their source text; ``specs`` and unknown
    keys keep YAML's typed values (numbers, booleans, dates).

    Raises:
        ParseError: if the YAML is invalid or is not a mapping.
    """
    if not block.strip():
        return {}
    try:
        data = yaml.safe_load(block)
        text = yaml.load(block, Loader=_TextLoader)  # noqa: S506
    except yaml.YAMLError as exc:
        raise ParseError(f"invalid YAML frontmatter: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ParseError(
            f"frontmatter must be a mapping, got {type(data).__name__}"
        )
    for key in STRING_FIELDS + LIST_FIELDS:
        if key in text:
            data[key] = text[key]
    return data


def extract_frontmatter(
    text: str, path: str = "", logger: logging.Logger | None = None
) -> tuple[dict[str, Any], str]:
    """Return (raw frontmatter dict, body) for *text*, recovering from bad YAML.

    A malformed block is logged and the whole *text* becomes the body.
    """
    log = logger or _log
    found = _locate_frontmatter(text)
    if found is None:
        if text.startswith(_DELIMITER + "\n") or text.startswith(_DELIMITER + "\r\n"):
            log.debug("unterminated frontmatter, treating file as body: %s", path)
        return {}, text
    block, body = found
    try:
        return load_frontmatter(block), body
    except ParseError as exc:
        log.warning("ignoring frontmatter in %s: %s", path or "<text>", exc)
        return {}, text


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


def normalize_metadata(raw: dict[str, Any]) -> Metadata:
    """Keep the recognised, non-empty frontmatter fields in canonical shape.

    Scalars become strings (YAML dates and numbers included), list fields
    become lists of strings (a bare string is promoted to a one-item list),
    and ``specs`` becomes a nested map of MetadataValue. Missing or empty
    fields are omitted.
    """
    metadata: Metadata = {}

    for key in STRING_FIELDS:
        value = _as_string(raw.get(key))
        if value:
            metadata[key] = value

    for key in LIST_FIELDS:
        items = _as_string_list(raw.get(key))
        if items:
            metadata[key] = items

    for key in MAP_FIELDS:
        value = raw.get(key)
        if isinstance(value, dict):
            nested = _normalize_map(value)
            if nested:
                metadata[key] = nested

    return metadata


def _as_string(value: Any) -> str:
    if value is None or isinstance(value, (dict, list)):
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dt.date, dt.datetime)):
        return value.isoformat()
    return str(value).strip()


def _as_string_list(value: Any) -> list[str]:
    if isinstance(value, (list, tuple)):
        items = [_as_string(v) for v in value]
        return [i for i in items if i]
    single = _as_string(value)
    return [single] if single else []


def _normalize_value(value: Any) -> MetadataValue | None:
    if value is None:
        return None
    # .inf / .nan have no JSON form
    if isinstance(value, float) and not math.isfinite(value):
        return str(value)
    if isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, dict):
        return _normalize_map(value)
    if isinstance(value, (list, tuple)):
        return _as_string_list(value)
    return _as_string(value)


def _normalize_map(raw: dict[Any, Any]) -> dict[str, MetadataValue]:
    result: dict[str, MetadataValue] = {}
    for key, value in raw.items():
        normalized = _normalize_value(value)
        if normalized is None or normalized == "" or normalized == [] or normalized == {}:
            continue
        result[str(key)] = normalized
    return result
