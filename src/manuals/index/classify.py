"""Domain/type classification and device ID generation from frontmatter."""

from __future__ import annotations

import re

from manuals.db.models import HARDWARE, PROTOCOL, SOFTWARE

_SOFTWARE_PREFIXES = ("libraries/", "frameworks/", "applications/", "software/")
_PROTOCOL_PREFIXES = ("protocols/", "protocol/")

_CATEGORY_JUNK_RE = re.compile(r"[^a-z0-9-]+")
_MODEL_JUNK_RE = re.compile(r"[^a-z0-9]+")


def domain_from_category(category: str) -> str:
    """Classify a slash-separated category path into a documentation domain.

    Anything not recognised as software or protocol is hardware, including
    an empty category.

    Examples:
        "libraries/display"   -> "software"
        "protocols/i2c"       -> "protocol"
        "sensors/temperature" -> "hardware"
    """
    lowered = category.strip().lower()
    if lowered.startswith(_SOFTWARE_PREFIXES):
        return SOFTWARE
    if lowered.startswith(_PROTOCOL_PREFIXES):
        return PROTOCOL
    return HARDWARE


def type_from_category(category: str) -> str:
    """Return the last path segment of *category*, or "unknown" if there is none."""
    segment = category.strip().rstrip("/").rsplit("/", 1)[-1].strip()
    return segment or "unknown"


def generate_device_id(category: str, model: str) -> str:
    """Derive a deterministic, URL-safe device ID from category and model.

    Examples:
        ("sensors/temperature", "DS18B20")  -> "sensors-temperature-ds18b20"
        ("boards/sbc", "Raspberry Pi 4 B")  -> "boards-sbc-raspberry-pi-4-b"
    """
    cat_norm = _CATEGORY_JUNK_RE.sub("-", category.replace("/", "-").lower())
    model_norm = _MODEL_JUNK_RE.sub("-", model.lower()).strip("-")
    return f"{cat_norm}-{model_norm}"
