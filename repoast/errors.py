"""Exception taxonomy shared by the ingestion pipeline."""

from __future__ import annotations

from typing import Optional


class RepoastError(RuntimeError):
    """Base class for errors raised by repoast components."""


class TraversalError(RepoastError):
    """Raised when the root of a local traversal cannot be read."""


class ParseError(RepoastError):
    """Raised by a format parser when content is malformed."""

    def __init__(
        self,
        message: str,
        *,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> None:
        self.line = line
        self.column = column
        if line is not None:
            location = f"line {line}" if column is None else f"line {line}, column {column}"
            message = f"{message} ({location})"
        super().__init__(message)


class SummarizationError(RepoastError):
    """Raised by the completion transport when no summary can be produced."""


class RemoteFetchError(RepoastError):
    """Raised when the source-hosting API cannot serve a listing or blob."""

    def __init__(self, message: str, *, status: Optional[int] = None) -> None:
        self.status = status
        super().__init__(message)


class PublishError(RepoastError):
    """Raised when a generated application cannot be published for preview."""


__all__ = [
    "ParseError",
    "PublishError",
    "RemoteFetchError",
    "RepoastError",
    "SummarizationError",
    "TraversalError",
]
