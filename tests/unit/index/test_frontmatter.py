"""Tests for frontmatter splitting, loading and metadata normalization."""

from __future__ import annotations

import datetime as dt
import logging

import pytest

from manuals.errors import ParseError
from manuals.index.frontmatter import (
    extract_frontmatter,
    load_frontmatter,
    normalize_metadata,
    split_frontmatter,
)


# ---------------------------------------------------------------------------
# split_frontmatter
# ---------------------------------------------------------------------------


def test_split_frontmatter_basic():
    block, body = split_frontmatter("---\nmodel: X\n---\n# Title\n")
    assert block == "model: X"
    assert body == "# Title"


def test_split_frontmatter_no_block():
    text = "# Just markdown\n---\nnot frontmatter"
    assert split_frontmatter(text) == ("", text)


def test_split_frontmatter_unterminated():
    text = "---\nmodel: X\n# never closed\n"
    assert split_frontmatter(text) == ("", text)


def test_split_frontmatter_empty_block():
    block, body = split_frontmatter("---\n---\nbody")
    assert block == ""
    assert body == "body"


def test_split_frontmatter_crlf():
    block, body = split_frontmatter("---\r\nmodel: X\r\n---\r\nbody\r\n")
    assert "model: X" in block
    assert body == "body"


# ---------------------------------------------------------------------------
# load_frontmatter
# ---------------------------------------------------------------------------


def test_load_frontmatter_mapping():
    assert load_frontmatter("model: X\ntags: [a, b]") == {"model": "X", "tags": ["a", "b"]}


def test_load_frontmatter_blank():
    assert load_frontmatter("  \n") == {}


def test_load_frontmatter_invalid_yaml():
    with pytest.raises(ParseError):
        load_frontmatter("model: [unclosed")


def test_load_frontmatter_keeps_string_fields_as_written():
    raw = load_frontmatter(
        "model: 0755\nversion: 1.10\nmanufacturer: yes\ndate: 2024-03-01\ntags: [40, off]"
    )
    assert raw["model"] == "0755"
    assert raw["version"] == "1.10"
    assert raw["manufacturer"] == "yes"
    assert raw["date"] == "2024-03-01"
    assert raw["tags"] == ["40", "off"]


def test_load_frontmatter_null_string_field_is_none():
    assert load_frontmatter("model: ~\nversion:")["model"] is None


def test_load_frontmatter_specs_keep_typed_values():
    raw = load_frontmatter("specs:\n  cores: 2\n  clock: 1.10\n  wifi: yes")
    assert raw["specs"] == {"cores": 2, "clock": 1.1, "wifi": True}


def test_load_frontmatter_non_mapping():
    with pytest.raises(ParseError, match="mapping"):
        load_frontmatter("- a\n- b")


# ---------------------------------------------------------------------------
# extract_frontmatter
# ---------------------------------------------------------------------------


def test_extract_frontmatter_recovers_from_bad_yaml(caplog):
    text = "---\nmodel: [unclosed\n---\n# Body\n"
    with caplog.at_level(logging.WARNING, logger="manuals"):
        raw, body = extract_frontmatter(text, path="bad.md")
    assert raw == {}
    assert body == text
    assert "bad.md" in caplog.text


def test_extract_frontmatter_without_block_keeps_text():
    raw, body = extract_frontmatter("plain text")
    assert raw == {}
    assert body == "plain text"


# ---------------------------------------------------------------------------
# normalize_metadata
# ---------------------------------------------------------------------------


def test_normalize_metadata_strings_and_lists():
    meta = normalize_metadata(
        {
            "manufacturer": "Maxim",
            "model": "DS18B20",
            "category": "sensors/temperature",
            "tags": ["temperature", "1-wire"],
            "datasheets": "https://example.com/ds18b20.pdf",
        }
    )
    assert meta == {
        "manufacturer": "Maxim",
        "model": "DS18B20",
        "category": "sensors/temperature",
        "tags": ["temperature", "1-wire"],
        "datasheets": ["https://example.com/ds18b20.pdf"],
    }


def test_normalize_metadata_coerces_scalars():
    meta = normalize_metadata({"model": 2040, "version": 1.2, "date": dt.date(2024, 3, 1)})
    assert meta == {"model": "2040", "version": "1.2", "date": "2024-03-01"}


def test_normalize_metadata_drops_unknown_and_empty():
    meta = normalize_metadata({"model": "", "tags": [], "author": "someone", "specs": {}})
    assert meta == {}


def test_normalize_metadata_specs_nested():
    meta = normalize_metadata(
        {"specs": {"voltage": "3.3V", "cores": 2, "power": {"sleep": "10 uA", "empty": None}}}
    )
    assert meta["specs"] == {"voltage": "3.3V", "cores": 2, "power": {"sleep": "10 uA"}}


def test_normalize_metadata_non_finite_specs_become_strings():
    meta = normalize_metadata(load_frontmatter("specs:\n  max: .inf\n  min: -.inf\n  odd: .nan"))
    assert meta["specs"] == {"max": "inf", "min": "-inf", "odd": "nan"}


def test_normalize_metadata_list_items_stringified():
    meta = normalize_metadata({"tags": ["gpio", 40, True, None]})
    assert meta["tags"] == ["gpio", "40", "true"]
