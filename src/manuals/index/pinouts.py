"""GPIO pinout table extraction from markdown bodies.

Recognises ordinary pipe tables whose header names a pin column::

    | Physical Pin | GPIO | Name  | Default Pull | Alt Functions   | Description |
    |--------------|------|-------|--------------|-----------------|-------------|
    | 1            | -    | 3V3   | -            | -               | Power       |
    | 3            | 2    | SDA1  | High         | I2C1 SDA, SMI   | -           |

Columns are positional: physical pin, GPIO, name, default pull, alternate
functions, description; the last three are optional and ``-`` means absent.
Rows that cannot be read are dropped without error.
"""

from __future__ import annotations

import re

from manuals.db.models import PULL_VALUES, Pinout

_PLACEHOLDER = "-"

# Scanner states
_SEARCHING = "searching"
_HEADER_FOUND = "header_found"
_IN_TABLE = "in_table"

_PIN_COLUMN_RE = re.compile(r"pin\b")


def extract_pinouts(markdown: str) -> list[Pinout]:
    """Return the pinouts of every pin table in *markdown*, in document order."""
    pinouts: list[Pinout] = []
    state = _SEARCHING

    for line in markdown.splitlines():
        stripped = line.strip()

        if state == _IN_TABLE:
            if not stripped or "|" not in stripped:
                state = _SEARCHING
                continue
            pin = parse_pinout_row(stripped)
            if pin is not None:
                pinouts.append(pin)
            continue

        if state == _HEADER_FOUND:
            if "|" in stripped and "-" in stripped:
                state = _IN_TABLE
                continue
            # Not a separator: this line may itself start another table.
            state = _SEARCHING

        if is_pin_header(stripped):
            state = _HEADER_FOUND

    return pinouts


def is_pin_header(line: str) -> bool:
    """True for a table row naming a physical-pin column or a column called "pin"."""
    if "|" not in line:
        return False
    lowered = line.lower()
    if "physical" in lowered and "pin" in lowered:
        return True
    return any(_PIN_COLUMN_RE.match(cell) for cell in _cells(lowered))


def parse_pinout_row(row: str) -> Pinout | None:
    """Parse one table row into a Pinout, or None if it is not a pin row."""
    cells = _cells(row)
    if len(cells) < 3:
        return None

    physical_pin = _parse_int(cells[0])
    if physical_pin is None:
        return None

    pin = Pinout(
        physical_pin=physical_pin,
        gpio_num=None if cells[1] == _PLACEHOLDER else _parse_int(cells[1]),
        name="" if cells[2] == _PLACEHOLDER else cells[2],
    )
    if len(cells) > 3:
        pin.default_pull = _parse_pull(cells[3])
    if len(cells) > 4 and cells[4] != _PLACEHOLDER:
        pin.alt_functions = [f.strip() for f in cells[4].split(",") if f.strip()]
    if len(cells) > 5 and cells[5] != _PLACEHOLDER:
        pin.description = cells[5]
    return pin


def _cells(row: str) -> list[str]:
    """Split on ``|``, trim, and drop empty cells."""
    return [c.strip() for c in row.split("|") if c.strip()]


def _parse_int(cell: str) -> int | None:
    try:
        return int(cell)
    except ValueError:
        return None


def _parse_pull(cell: str) -> str | None:
    lowered = cell.lower()
    for value in PULL_VALUES:
        if value in lowered:
            return value
    return None
