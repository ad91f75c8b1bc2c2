"""Stylesheet parser built on tinycss2."""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

import tinycss2

from ..errors import ParseError
from ..models import ContentCategory, StyleNode
from .base import FormatParser

_CLOSERS = {"}": "{", "]": "[", ")": "("}
_UNCLOSED = {"{": "Unclosed block", "[": "Unclosed bracket", "(": "Unclosed bracket"}

# At-rules whose block holds nested rules rather than declarations.
_RULE_LIST_AT_RULES = frozenset(
    {
        "media",
        "supports",
        "document",
        "layer",
        "container",
        "scope",
        "starting-style",
        "keyframes",
        "-webkit-keyframes",
        "-moz-keyframes",
    }
)


class StylesheetParser(FormatParser):
    """Builds a rule tree of rules, at-rules and declarations."""

    category = ContentCategory.STYLESHEET

    def parse(self, text: str, *, path: str = "") -> StyleNode:
        _check_terminated(text)
        nodes = tinycss2.parse_stylesheet(text, skip_comments=False, skip_whitespace=True)
        return StyleNode(type="stylesheet", children=self._convert_rules(nodes))

    def _convert_rules(self, nodes: Iterable[object]) -> List[StyleNode]:
        converted: List[StyleNode] = []
        for node in nodes:
            node_type = getattr(node, "type", None)
            if node_type == "error":
                _raise(node)
            elif node_type == "comment":
                converted.append(StyleNode(type="comment", value=node.value))
            elif node_type == "qualified-rule":
                converted.append(
                    StyleNode(
                        type="rule",
                        prelude=_serialize(node.prelude),
                        children=self._convert_declarations(node.content),
                    )
                )
            elif node_type == "at-rule":
                converted.append(self._convert_at_rule(node))
        return converted

    def _convert_at_rule(self, node) -> StyleNode:  # type: ignore[no-untyped-def]
        rule = StyleNode(type="atrule", name=node.lower_at_keyword, prelude=_serialize(node.prelude))
        if node.content is None:
            return rule
        if node.lower_at_keyword in _RULE_LIST_AT_RULES:
            nested = tinycss2.parse_rule_list(node.content, skip_comments=False, skip_whitespace=True)
            rule.children = self._convert_rules(nested)
        else:
            rule.children = self._convert_declarations(node.content)
        return rule

    def _convert_declarations(self, content) -> List[StyleNode]:  # type: ignore[no-untyped-def]
        converted: List[StyleNode] = []
        items = tinycss2.parse_declaration_list(content, skip_comments=False, skip_whitespace=True)
        for item in items:
            if item.type == "error":
                _raise(item)
            elif item.type == "comment":
                converted.append(StyleNode(type="comment", value=item.value))
            elif item.type == "declaration":
                converted.append(
                    StyleNode(
                        type="declaration",
                        name=item.name,
                        value=_serialize(item.value),
                        important=item.important,
                    )
                )
            elif item.type == "at-rule":
                converted.append(self._convert_at_rule(item))
        return converted


def _serialize(tokens) -> str:  # type: ignore[no-untyped-def]
    return tinycss2.serialize(tokens).strip()


def _check_terminated(text: str) -> None:
    """Raise ParseError for blocks, comments or strings still open at end of input.

    tinycss2 follows the CSS error-recovery rules and closes these silently.
    """
    problem = _find_unterminated(text)
    if problem is not None:
        message, offset = problem
        line = text.count("\n", 0, offset) + 1
        column = offset - (text.rfind("\n", 0, offset) + 1) + 1
        raise ParseError(message, line=line, column=column)


def _find_unterminated(text: str) -> Optional[Tuple[str, int]]:
    openers: List[Tuple[str, int]] = []
    index, length = 0, len(text)
    while index < length:
        char = text[index]
        if text.startswith("/*", index):
            end = text.find("*/", index + 2)
            if end == -1:
                return "Unclosed comment", index
            index = end + 2
            continue
        if char in "\"'":
            cursor = index + 1
            while cursor < length and text[cursor] != char:
                if text[cursor] == "\n":
                    return "Unclosed string", index
                cursor += 2 if text[cursor] == "\\" else 1
            if cursor >= length:
                return "Unclosed string", index
            index = cursor + 1
            continue
        if char == "\\":
            index += 2
            continue
        if char in _UNCLOSED:
            openers.append((char, index))
        elif char in _CLOSERS:
            expected = _CLOSERS[char]
            if openers and openers[-1][0] == expected:
                openers.pop()
            elif any(opener == expected for opener, _ in openers):
                opener, offset = openers[-1]
                return _UNCLOSED[opener], offset
        index += 1
    if openers:
        opener, offset = openers[-1]
        return _UNCLOSED[opener], offset
    return None


def _raise(error) -> None:  # type: ignore[no-untyped-def]
    raise ParseError(error.message, line=error.source_line, column=error.source_column)


__all__ = ["StylesheetParser"]
