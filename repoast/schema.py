"""Schema derivation for parsed structured-data documents."""

from __future__ import annotations

from typing import Any, Dict, Set

from .models import SchemaNode


def kind_of(value: Any) -> str:
    """Return the schema kind for a single parsed value."""
    if value is None:
        return "null"
    if isinstance(value, dict):
        return "object"
    if isinstance(value, (list, tuple)):
        return "array"
    # bool is a subclass of int and must be tested first.
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    return "undefined"


def derive_schema(value: Any) -> SchemaNode:
    """Derive a minimal schema for ``value``.

    Objects recurse into every key. Arrays and scalars terminate recursion:
    element shapes of arrays are not described. A mapping that reappears
    inside itself is described as an object without properties.
    """
    return _derive(value, set())


def _derive(value: Any, ancestors: Set[int]) -> SchemaNode:
    kind = kind_of(value)
    if kind != "object":
        return SchemaNode(kind=kind)
    identity = id(value)
    if identity in ancestors:
        # YAML aliases can make a mapping contain itself.
        return SchemaNode(kind="object")
    ancestors.add(identity)
    properties: Dict[str, SchemaNode] = {}
    for key, item in value.items():
        properties[str(key)] = _derive(item, ancestors)
    ancestors.discard(identity)
    return SchemaNode(kind="object", properties=properties)


__all__ = ["derive_schema", "kind_of"]
