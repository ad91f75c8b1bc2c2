"""Tree-sitter powered parser for JavaScript and TypeScript sources."""

from __future__ import annotations

import threading
from typing import Dict, Optional

from tree_sitter import Node, Parser
from tree_sitter_language_pack import get_parser

from ..errors import ParseError
from ..models import ContentCategory, SyntaxNode
from .base import FormatParser

# tsx is a superset grammar: plain JavaScript, JSX and typed TSX all parse with it.
# Plain .ts keeps its own grammar because `<T>value` casts conflict with JSX.
_TYPESCRIPT_SUFFIXES = (".ts", ".mts", ".cts")


class ScriptParser(FormatParser):
    """Builds a syntax tree of named nodes for script files."""

    category = ContentCategory.SCRIPT

    def __init__(self) -> None:
        self._local = threading.local()

    def parse(self, text: str, *, path: str = "") -> SyntaxNode:
        language_key = self.language_for_path(path)
        source_bytes = text.encode("utf-8")
        tree = self._get_parser(language_key).parse(source_bytes)
        root = tree.root_node
        if root.has_error:
            self._raise_first_error(root)
        return self._convert(root, source_bytes)

    @staticmethod
    def language_for_path(path: str) -> str:
        lower = path.lower()
        if lower.endswith(_TYPESCRIPT_SUFFIXES):
            return "typescript"
        return "tsx"

    def _get_parser(self, language_key: str) -> Parser:
        # Parser objects are not shared across worker threads.
        parsers: Optional[Dict[str, Parser]] = getattr(self._local, "parsers", None)
        if parsers is None:
            parsers = {}
            self._local.parsers = parsers
        parser = parsers.get(language_key)
        if parser is None:
            parser = get_parser(language_key)
            parsers[language_key] = parser
        return parser

    def _convert(self, node: Node, source_bytes: bytes, field: Optional[str] = None) -> SyntaxNode:
        converted = SyntaxNode(
            type=node.type,
            start=(node.start_point[0], node.start_point[1]),
            end=(node.end_point[0], node.end_point[1]),
            field=field,
        )
        if node.named_child_count == 0:
            converted.text = self._node_text(node, source_bytes)
            return converted
        for index, child in enumerate(node.children):
            if not child.is_named:
                continue
            child_field = node.field_name_for_child(index)
            converted.children.append(self._convert(child, source_bytes, child_field))
        return converted

    @staticmethod
    def _node_text(node: Node, source_bytes: bytes) -> str:
        return source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")

    @staticmethod
    def _raise_first_error(root: Node) -> None:
        stack = [root]
        while stack:
            node = stack.pop()
            if node.is_error or node.is_missing:
                line, column = node.start_point[0] + 1, node.start_point[1] + 1
                if node.is_missing:
                    raise ParseError(f"Missing {node.type}", line=line, column=column)
                raise ParseError("Unexpected token", line=line, column=column)
            stack.extend(reversed(node.children))
        raise ParseError("Syntax error")


__all__ = ["ScriptParser"]
