"""Markdown documentation parser.

Turns one documentation file into a ParsedDocument: normalized metadata,
domain/type classification, a stable device ID, the markdown body, and (for
hardware) any embedded pinout tables plus flattened specifications.

Usage:
    doc = parse_markdown_file(Path("docs/sensors/ds18b20.md"))
    print(doc.id, doc.domain, len(doc.pinouts))
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from manuals.db.models import HARDWARE, Metadata, MetadataValue, Pinout, Specification
from manuals.errors import FileAccessError
from manuals.index.classify import domain_from_category, generate_device_id, type_from_category
from manuals.index.frontmatter import extract_frontmatter, normalize_metadata
from manuals.index.pinouts import extract_pinouts

# "3.3 V", "100kHz", "0.5 °C" -> (number, unit). Ranges and prose stay unsplit.
_QUANTITY_RE = re.compile(r"^([-+]?\d+(?:\.\d+)?)\s*([^\W\d_][\w/%°µΩ]*|%|°\w*)$")

_log = logging.getLogger(__name__)


@dataclass
class ParsedDocument:
    id: str
    domain: str
    type: str
    metadata: Metadata
    content: str
    pinouts: list[Pinout] = field(default_factory=list)
    specifications: list[Specification] = field(default_factory=list)

    @property
    def name(self) -> str:
        return device_name(self.metadata)


def parse_markdown_file(path: Path, logger: logging.Logger | None = None) -> ParsedDocument:
    """Read and parse a single markdown file.

    Raises:
        FileAccessError: if the file cannot be read.
    """
    try:
        text = path.read_text(encoding="utf-8-sig", errors="replace")
    except OSError as exc:
        raise FileAccessError(str(path), exc) from exc
    return parse_markdown(text, path=str(path), logger=logger)


def parse_markdown(text: str, path: str = "", logger: logging.Logger | None = None) -> ParsedDocument:
    """Parse markdown *text*; never fails on malformed frontmatter or tables."""
    log = logger or _log
    raw, body = extract_frontmatter(text, path=path, logger=log)
    metadata = normalize_metadata(raw)

    category = str(metadata.get("category", ""))
    model = str(metadata.get("model", ""))
    domain = domain_from_category(category)

    doc = ParsedDocument(
        id=generate_device_id(category, model),
        domain=domain,
        type=type_from_category(category),
        metadata=metadata,
        content=body,
    )
    if domain == HARDWARE:
        doc.pinouts = extract_pinouts(body)
    specs = metadata.get("specs")
    if isinstance(specs, dict):
        doc.specifications = extract_specifications(specs)

    log.debug(
        "parsed %s: id=%s domain=%s type=%s pinouts=%d",
        path or "<text>", doc.id, doc.domain, doc.type, len(doc.pinouts),
    )
    return doc


def device_name(metadata: Metadata) -> str:
    """Display name: the model, else "Unknown".

    A manufacturer alone never names a device.
    """
    model = metadata.get("model")
    if isinstance(model, str) and model:
        return model
    return "Unknown"


def extract_specifications(specs: dict[str, MetadataValue]) -> list[Specification]:
    """Flatten a ``specs`` map into key/value/unit rows.

    Nested maps use dotted keys ("power.voltage"), lists are joined with
    ", ", and "<number> <unit>" strings are split into value and unit.
    """
    rows: list[Specification] = []
    _flatten_specs("", specs, rows)
    return rows


def _flatten_specs(prefix: str, value: MetadataValue, out: list[Specification]) -> None:
    if isinstance(value, dict):
        for key, nested in value.items():
            _flatten_specs(f"{prefix}.{key}" if prefix else key, nested, out)
        return
    if isinstance(value, list):
        out.append(Specification(key=prefix, value=", ".join(str(v) for v in value)))
        return
    if isinstance(value, bool):
        out.append(Specification(key=prefix, value="true" if value else "false"))
        return
    text = str(value)
    match = _QUANTITY_RE.match(text.strip())
    if match:
        out.append(Specification(key=prefix, value=match.group(1), unit=match.group(2)))
    else:
        out.append(Specification(key=prefix, value=text))
