"""Markdown parser: converts prose to HTML, then builds a DOM tree."""

from __future__ import annotations

import markdown

from ..models import ContentCategory, DomNode
from .base import FormatParser
from .markup import parse_markup

_EXTENSIONS = ("fenced_code", "tables")


class ProseParser(FormatParser):
    category = ContentCategory.PROSE

    def parse(self, text: str, *, path: str = "") -> DomNode:
        html = markdown.markdown(text, extensions=list(_EXTENSIONS))
        return parse_markup(html)


__all__ = ["ProseParser"]
