"""Manuals indexing pipeline — frontmatter, classification, pinouts, orchestration."""

from manuals.index.classify import domain_from_category, generate_device_id, type_from_category
from manuals.index.indexer import IndexOptions, IndexResult, index_documentation
from manuals.index.parser import ParsedDocument, parse_markdown, parse_markdown_file
from manuals.index.pinouts import extract_pinouts

__all__ = [
    "IndexOptions",
    "IndexResult",
    "ParsedDocument",
    "domain_from_category",
    "extract_pinouts",
    "generate_device_id",
    "index_documentation",
    "parse_markdown",
    "parse_markdown_file",
    "type_from_category",
]
