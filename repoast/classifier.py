"""Extension-based content classification."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Dict

from .models import ContentCategory

_SCRIPT_SUFFIXES = (".js", ".jsx", ".mjs", ".cjs", ".ts", ".tsx", ".mts", ".cts")
_STRUCTURED_SUFFIXES = (".json", ".yaml", ".yml", ".toml")
_MARKUP_SUFFIXES = (".html", ".htm", ".xhtml")
_STYLESHEET_SUFFIXES = (".css",)
_PROSE_SUFFIXES = (".md", ".markdown")
_MEDIA_SUFFIXES = (
    # images
    ".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp", ".ico", ".svg", ".tif", ".tiff",
    ".avif", ".heic", ".psd",
    # audio
    ".mp3", ".wav", ".ogg", ".flac", ".aac", ".m4a",
    # video
    ".mp4", ".webm", ".mov", ".avi", ".mkv", ".m4v",
    # fonts
    ".woff", ".woff2", ".ttf", ".otf", ".eot",
    # documents and archives
    ".pdf", ".zip", ".gz", ".tgz", ".tar", ".bz2", ".xz", ".7z", ".rar", ".jar",
    # compiled artifacts
    ".exe", ".dll", ".so", ".dylib", ".wasm", ".class", ".pyc", ".bin",
)

_CATEGORY_BY_SUFFIX: Dict[str, ContentCategory] = {}
for _suffixes, _category in (
    (_SCRIPT_SUFFIXES, ContentCategory.SCRIPT),
    (_STRUCTURED_SUFFIXES, ContentCategory.STRUCTURED_DATA),
    (_MARKUP_SUFFIXES, ContentCategory.MARKUP),
    (_STYLESHEET_SUFFIXES, ContentCategory.STYLESHEET),
    (_PROSE_SUFFIXES, ContentCategory.PROSE),
    (_MEDIA_SUFFIXES, ContentCategory.MEDIA),
):
    for _suffix in _suffixes:
        _CATEGORY_BY_SUFFIX[_suffix] = _category


def classify(path: str) -> ContentCategory:
    """Return the content category for ``path``; unknown extensions are Unsupported."""
    suffix = PurePosixPath(path.replace("\\", "/")).suffix.lower()
    return _CATEGORY_BY_SUFFIX.get(suffix, ContentCategory.UNSUPPORTED)


__all__ = ["classify"]
