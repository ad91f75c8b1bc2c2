"""Parser for structured-data documents (JSON, YAML, TOML)."""

from __future__ import annotations

import json
import tomllib
from typing import Any

import yaml

from ..errors import ParseError
from ..models import ContentCategory, SchemaNode
from ..schema import derive_schema
from .base import FormatParser


class StructuredDataParser(FormatParser):
    """Decodes a data document and hands the value to the schema deriver."""

    category = ContentCategory.STRUCTURED_DATA

    def parse(self, text: str, *, path: str = "") -> SchemaNode:
        return derive_schema(self.load(text, path=path))

    @staticmethod
    def load(text: str, *, path: str = "") -> Any:
        lower = path.lower()
        if lower.endswith((".yaml", ".yml")):
            return _load_yaml(text)
        if lower.endswith(".toml"):
            return _load_toml(text)
        return _load_json(text)


def _load_json(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(exc.msg, line=exc.lineno, column=exc.colno) from exc


def _load_yaml(text: str) -> Any:
    try:
        return yaml.safe_load(text)
    except yaml.MarkedYAMLError as exc:
        mark = exc.problem_mark or exc.context_mark
        message = exc.problem or str(exc)
        if mark is None:
            raise ParseError(message) from exc
        raise ParseError(message, line=mark.line + 1, column=mark.column + 1) from exc
    except yaml.YAMLError as exc:
        raise ParseError(str(exc)) from exc


def _load_toml(text: str) -> Any:
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ParseError(str(exc)) from exc


__all__ = ["StructuredDataParser"]
