"""Directory traversal producing the ordered list of files to ingest."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Iterator, List

from .config import DEFAULT_IGNORE_DIRS
from .errors import TraversalError


def is_ignored(rel_path: str, ignore_dirs: Iterable[str]) -> bool:
    """Return True when any directory segment of ``rel_path`` is an ignored name."""
    names = set(ignore_dirs)
    directories = rel_path.split("/")[:-1]
    return any(part in names for part in directories)


class TreeWalker:
    """Walks a directory tree, pruning ignored directories at every depth."""

    def __init__(self, ignore_dirs: Iterable[str] = DEFAULT_IGNORE_DIRS) -> None:
        self.ignore_dirs = frozenset(ignore_dirs)

    def walk(self, root: str | Path) -> List[str]:
        """Return repository-relative POSIX paths of every regular file under ``root``."""
        return list(self.iter_files(root))

    def iter_files(self, root: str | Path) -> Iterator[str]:
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise TraversalError(f"Repository path not found: {root}")
        if not root_path.is_dir():
            raise TraversalError(f"Repository path is not a directory: {root}")

        for dirpath, dirnames, filenames in os.walk(root_path, onerror=_raise_traversal_error):
            current_dir = Path(dirpath)
            rel_dir = current_dir.relative_to(root_path).as_posix() if current_dir != root_path else ""

            # Pruning in place keeps os.walk from descending into ignored directories.
            dirnames[:] = sorted(name for name in dirnames if name not in self.ignore_dirs)

            for filename in sorted(filenames):
                if not (current_dir / filename).is_file():
                    continue
                yield f"{rel_dir}/{filename}" if rel_dir else filename


def _raise_traversal_error(exc: OSError) -> None:
    raise TraversalError(f"Unable to read directory {exc.filename}: {exc.strerror}") from exc


__all__ = ["TreeWalker", "is_ignored"]
