"""FTS5 query construction for device search.

Hyphenated model numbers ("raspberry-pi-4", "esp32-s3") must match as a
phrase: left bare, FTS5 reads the hyphen as an operator. Plain multi-word
queries ("analog sensor") stay unquoted so FTS5 applies its implicit AND
instead of demanding the exact phrase.
"""

from __future__ import annotations

from dataclasses import dataclass

from manuals.db.models import DOMAINS


@dataclass
class SearchOptions:
    query: str
    domain: str | None = None
    type: str | None = None
    limit: int = 10
    offset: int = 0

    def validate(self, max_limit: int | None = None) -> None:
        """Raise ValueError for out-of-range pagination or an unknown domain."""
        if self.limit < 1:
            raise ValueError(f"limit must be >= 1, got {self.limit}")
        if max_limit is not None and self.limit > max_limit:
            raise ValueError(f"limit must be <= {max_limit}, got {self.limit}")
        if self.offset < 0:
            raise ValueError(f"offset must be >= 0, got {self.offset}")
        if self.domain is not None and self.domain not in DOMAINS:
            raise ValueError(
                f"unknown domain {self.domain!r} (expected one of: {', '.join(DOMAINS)})"
            )


def quote_phrase(text: str) -> str:
    """Wrap *text* in double quotes, doubling any embedded quotes."""
    return '"' + text.replace('"', '""') + '"'


def looks_like_model_number(query: str) -> bool:
    """True for a single token made of two or more hyphen-separated segments."""
    if len(query.split()) != 1:
        return False
    return len([seg for seg in query.split("-") if seg]) > 1


def build_fts_query(query: str) -> str:
    """Translate a raw user query into an FTS5 MATCH expression.

    Examples:
        "raspberry-pi-4"             -> '"raspberry-pi-4"'
        "analog sensor"              -> 'analog sensor'
        "analog ds18b20-like sensor" -> 'analog "ds18b20-like" sensor'
        'esp32 "dev kit"'            -> 'esp32 "dev kit"'

    A malformed expression (e.g. an unbalanced quote) is left for FTS5 to
    reject; Repository.search reports it as SearchQueryError.
    """
    query = query.strip()
    if not query:
        return ""

    if looks_like_model_number(query):
        return quote_phrase(query)

    # Only hyphenated words are quoted; user-typed phrases, grouping and
    # operators pass through to FTS5 as written.
    words = [quote_phrase(word) if "-" in word else word for word in query.split()]
    return " ".join(words)
