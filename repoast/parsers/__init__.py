"""Format parsers and the category dispatch table."""

from __future__ import annotations

from typing import Any, Dict, FrozenSet

from ..models import ContentCategory
from .base import FormatParser
from .markup import MarkupParser
from .prose import ProseParser
from .script import ScriptParser
from .stylesheet import StylesheetParser
from .structured import StructuredDataParser

SKIPPED_CATEGORIES: FrozenSet[ContentCategory] = frozenset(
    {ContentCategory.MEDIA, ContentCategory.UNSUPPORTED}
)

PARSERS: Dict[ContentCategory, FormatParser] = {
    parser.category: parser
    for parser in (
        ScriptParser(),
        StructuredDataParser(),
        MarkupParser(),
        StylesheetParser(),
        ProseParser(),
    )
}

_covered = set(PARSERS) | set(SKIPPED_CATEGORIES)
if _covered != set(ContentCategory) or set(PARSERS) & SKIPPED_CATEGORIES:
    missing = ", ".join(sorted(c.value for c in set(ContentCategory) - _covered))
    raise RuntimeError(f"Parser dispatch does not cover every category: {missing or 'overlap'}")


def parse_content(category: ContentCategory, text: str, *, path: str = "") -> Any:
    """Dispatch ``text`` to the parser for ``category``."""
    parser = PARSERS.get(category)
    if parser is None:
        raise LookupError(f"No parser for category {category.value}")
    return parser.parse(text, path=path)


__all__ = [
    "FormatParser",
    "MarkupParser",
    "PARSERS",
    "ProseParser",
    "SKIPPED_CATEGORIES",
    "ScriptParser",
    "StructuredDataParser",
    "StylesheetParser",
    "parse_content",
]
