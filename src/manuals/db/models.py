"""Domain models for the manuals database layer."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Union

# Coarse documentation domains (devices.domain CHECK constraint).
HARDWARE = "hardware"
SOFTWARE = "software"
PROTOCOL = "protocol"
DOMAINS: tuple[str, ...] = (HARDWARE, SOFTWARE, PROTOCOL)

PULL_VALUES: tuple[str, ...] = ("high", "low", "none")

# Frontmatter values after normalization; stored as JSON in devices.metadata.
MetadataValue = Union[str, int, float, bool, list[str], dict[str, "MetadataValue"]]
Metadata = dict[str, MetadataValue]


@dataclass
class Pinout:
    physical_pin: int
    name: str = ""
    gpio_num: int | None = None
    default_pull: str | None = None  # high | low | none
    alt_functions: list[str] = field(default_factory=list)
    description: str | None = None


@dataclass
class Specification:
    key: str
    value: str
    unit: str | None = None


@dataclass
class Device:
    id: str
    domain: str  # hardware | software | protocol
    type: str
    name: str
    path: str
    metadata: Metadata = field(default_factory=dict)
    content: str = ""
    indexed_at: str | None = None

    @property
    def tags(self) -> list[str]:
        tags = self.metadata.get("tags")
        if isinstance(tags, list):
            return [str(t) for t in tags]
        return []

    def metadata_json(self) -> str:
        """Serialize metadata as strict JSON; NaN and infinities raise ValueError."""
        return json.dumps(self.metadata, sort_keys=True, allow_nan=False)


@dataclass
class SearchResult:
    id: str
    name: str
    domain: str
    type: str
    path: str
    relevance: float  # FTS5 rank: lower (more negative) = better
    metadata: Metadata = field(default_factory=dict)


@dataclass
class Guide:
    id: str
    title: str
    content: str = ""
    indexed_at: str | None = None


@dataclass
class DatabaseStats:
    total_devices: int = 0
    hardware_count: int = 0
    software_count: int = 0
    protocol_count: int = 0
    total_pinouts: int = 0
    total_specs: int = 0
    total_guides: int = 0
