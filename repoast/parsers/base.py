"""Base class for format parsers."""

from abc import ABC, abstractmethod
from typing import Any

from ..models import ContentCategory


class FormatParser(ABC):
    """Contract for parsers that turn raw text into a structural representation."""

    category: ContentCategory

    @abstractmethod
    def parse(self, text: str, *, path: str = "") -> Any:
        """Return the structural representation, raising ParseError on malformed input."""
