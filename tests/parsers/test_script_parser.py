"""Tests for the tree-sitter script parser."""

from __future__ import annotations

from typing import Iterator

import pytest

from repoast.errors import ParseError
from repoast.models import SyntaxNode
from repoast.parsers.script import ScriptParser

_APP_JS = """
import React, { useState } from 'react';

const App = () => {
  const [likes, setLikes] = useState(0);
  if (likes > 10) {
    return null;
  }
  return (
    <div className="p-4">
      <span onClick={() => setLikes(likes + 1)}>{likes} likes</span>
    </div>
  );
};

export default App;
"""


def _walk(node: SyntaxNode) -> Iterator[SyntaxNode]:
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def _types(node: SyntaxNode) -> set[str]:
    return {item.type for item in _walk(node)}


def test_parses_jsx_components() -> None:
    tree = ScriptParser().parse(_APP_JS, path="src/App.js")

    assert tree.type == "program"
    types = _types(tree)
    assert {"import_statement", "arrow_function", "if_statement", "jsx_element"} <= types


def test_parses_typescript_declarations() -> None:
    source = """
interface Props { name: string; count?: number }

export function greet(props: Props): string {
  return props.name ?? "anonymous";
}
"""
    tree = ScriptParser().parse(source, path="src/greet.ts")

    types = _types(tree)
    assert "interface_declaration" in types
    assert "function_declaration" in types


def test_parses_typed_jsx() -> None:
    source = "export const Button = ({ label }: { label: string }) => <button>{label}</button>;\n"

    tree = ScriptParser().parse(source, path="src/Button.tsx")

    assert "jsx_element" in _types(tree)


def test_leaf_nodes_carry_text_and_fields() -> None:
    tree = ScriptParser().parse("function helper(x) { return x; }\n", path="a.js")

    declaration = next(node for node in _walk(tree) if node.type == "function_declaration")
    name = next(child for child in declaration.children if child.field == "name")
    assert name.type == "identifier"
    assert name.text == "helper"
    assert declaration.start == (0, 0)


def test_malformed_script_raises_parse_error() -> None:
    with pytest.raises(ParseError) as excinfo:
        ScriptParser().parse("const = ;\nfunction (", path="broken.js")

    assert excinfo.value.line is not None


def test_language_selection_by_extension() -> None:
    assert ScriptParser.language_for_path("a.ts") == "typescript"
    assert ScriptParser.language_for_path("a.tsx") == "tsx"
    assert ScriptParser.language_for_path("a.jsx") == "tsx"
    assert ScriptParser.language_for_path("a.js") == "tsx"
