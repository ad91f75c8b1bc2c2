"""Tolerant HTML parser producing a document-object tree."""

from __future__ import annotations

from html.parser import HTMLParser
from typing import List, Optional, Tuple

from ..models import ContentCategory, DomNode
from .base import FormatParser

_VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)


class _DomBuilder(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.root = DomNode(type="root")
        self._open: List[DomNode] = [self.root]

    @property
    def _current(self) -> DomNode:
        return self._open[-1]

    def _append(self, node: DomNode) -> DomNode:
        parent = self._current
        node.parent = parent
        parent.children.append(node)
        return node

    def handle_starttag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> None:
        element = self._append(DomNode(type="tag", name=tag, attribs=dict(attrs)))
        if tag not in _VOID_ELEMENTS:
            self._open.append(element)

    def handle_endtag(self, tag: str) -> None:
        # Close back to the nearest matching open element; stray end tags are dropped.
        for index in range(len(self._open) - 1, 0, -1):
            if self._open[index].name == tag:
                del self._open[index:]
                return

    def handle_data(self, data: str) -> None:
        children = self._current.children
        if children and children[-1].type == "text":
            children[-1].data = (children[-1].data or "") + data
            return
        self._append(DomNode(type="text", data=data))

    def handle_comment(self, data: str) -> None:
        self._append(DomNode(type="comment", data=data))

    def handle_decl(self, decl: str) -> None:
        name = decl.split(None, 1)[0].lower() if decl.strip() else ""
        self._append(DomNode(type="directive", name=f"!{name}", data=f"!{decl}"))

    def handle_pi(self, data: str) -> None:
        self._append(DomNode(type="directive", name="?", data=f"?{data}"))

    def unknown_decl(self, data: str) -> None:
        self._append(DomNode(type="directive", name="!", data=f"!{data}"))


def parse_markup(text: str) -> DomNode:
    """Parse ``text`` into a DOM tree; unclosed tags are closed at end of input."""
    builder = _DomBuilder()
    builder.feed(text)
    builder.close()
    return builder.root


class MarkupParser(FormatParser):
    """Total markup parser; malformed HTML yields a best-effort tree."""

    category = ContentCategory.MARKUP

    def parse(self, text: str, *, path: str = "") -> DomNode:
        return parse_markup(text)


__all__ = ["MarkupParser", "parse_markup"]
