"""JSON serialization that tolerates shared and cyclic object references."""

from __future__ import annotations

import dataclasses
import json
from enum import Enum
from pathlib import Path, PurePath
from typing import Any, Iterable, List, Mapping, Set, Tuple

CIRCULAR = "[Circular]"

_Frame = Tuple[Any, Any, Any]


def make_safe(value: Any, *, sentinel: str = CIRCULAR) -> Any:
    """Convert ``value`` into plain JSON data.

    Every mutable container or object is recorded by identity the first time it
    is rendered; any later occurrence within the same call (a cycle or a
    shared reference) is replaced by ``sentinel``. Traversal is depth-first in
    document order and uses an explicit stack, so it runs in time linear in
    the size of the graph regardless of nesting depth.
    """
    seen: Set[int] = set()
    holder: List[Any] = [None]
    stack: List[_Frame] = [(value, holder, 0)]
    while stack:
        current, container, key = stack.pop()
        container[key] = _visit(current, seen, sentinel, stack)
    return holder[0]


def dumps(value: Any, *, indent: int | None = None, sentinel: str = CIRCULAR) -> str:
    """Serialize ``value`` to a JSON string."""
    return json.dumps(make_safe(value, sentinel=sentinel), indent=indent, ensure_ascii=False)


def dump(value: Any, path: str | Path, *, indent: int | None = None) -> Path:
    """Serialize ``value`` into the file at ``path`` and return the path."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(dumps(value, indent=indent), encoding="utf-8")
    return target


def _visit(current: Any, seen: Set[int], sentinel: str, stack: List[_Frame]) -> Any:
    if isinstance(current, Enum):
        current = current.value
    if current is None or isinstance(current, (str, bool, int, float)):
        return current
    if isinstance(current, (bytes, bytearray)):
        return bytes(current).decode("utf-8", errors="replace")
    if isinstance(current, PurePath):
        return str(current)

    # Tuples and frozensets cannot close a cycle on their own, so they are values.
    if not isinstance(current, (tuple, frozenset)):
        identity = id(current)
        if identity in seen:
            return sentinel
        seen.add(identity)

    if dataclasses.is_dataclass(current) and not isinstance(current, type):
        return _expand_mapping(
            ((item.name, getattr(current, item.name)) for item in dataclasses.fields(current)),
            stack,
        )
    if isinstance(current, Mapping):
        return _expand_mapping(((str(k), v) for k, v in current.items()), stack)
    if isinstance(current, (list, tuple)):
        return _expand_sequence(current, stack)
    if isinstance(current, (set, frozenset)):
        return _expand_sequence(sorted(current, key=repr), stack)
    if hasattr(current, "__dict__"):
        return _expand_mapping(vars(current).items(), stack)
    return str(current)


def _expand_mapping(items: Iterable[Tuple[str, Any]], stack: List[_Frame]) -> dict:
    result: dict = {}
    frames: List[_Frame] = []
    for key, value in items:
        result[key] = None
        frames.append((value, result, key))
    stack.extend(reversed(frames))
    return result


def _expand_sequence(items: Iterable[Any], stack: List[_Frame]) -> list:
    values = list(items)
    result: list = [None] * len(values)
    stack.extend((value, result, index) for index, value in reversed(list(enumerate(values))))
    return result


__all__ = ["CIRCULAR", "dump", "dumps", "make_safe"]
