"""Core data models shared across repoast components."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class ContentCategory(Enum):
    """Content type of a file, derived from its extension."""

    SCRIPT = "Script"
    STRUCTURED_DATA = "StructuredData"
    MARKUP = "Markup"
    STYLESHEET = "Stylesheet"
    PROSE = "Prose"
    MEDIA = "Media"
    UNSUPPORTED = "Unsupported"


class RecordStatus(Enum):
    """Terminal state of one file's trip through the pipeline."""

    PARSED = "parsed"
    ERROR = "error"
    SKIPPED = "skipped"


@dataclass
class SchemaNode:
    """Minimal type schema derived from a structured-data value."""

    kind: str
    properties: Optional[Dict[str, "SchemaNode"]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"kind": self.kind}
        if self.properties is not None:
            data["properties"] = {
                name: node.to_dict() for name, node in self.properties.items()
            }
        return data

    def to_output(self) -> Dict[str, Any]:
        """Object roots render as their field mapping; other roots keep their kind."""
        if self.kind == "object" and self.properties is not None:
            return {name: node.to_dict() for name, node in self.properties.items()}
        return self.to_dict()


@dataclass
class SyntaxNode:
    """Named node of a script syntax tree."""

    type: str
    start: Tuple[int, int]
    end: Tuple[int, int]
    children: List["SyntaxNode"] = field(default_factory=list)
    # Declared after children so the name does not shadow dataclasses.field.
    field: Optional[str] = None
    text: Optional[str] = None


@dataclass
class DomNode:
    """Element, text, comment or directive node of a markup document tree."""

    type: str
    name: Optional[str] = None
    attribs: Dict[str, Optional[str]] = field(default_factory=dict)
    data: Optional[str] = None
    children: List["DomNode"] = field(default_factory=list)
    parent: Optional["DomNode"] = field(default=None, repr=False, compare=False)

    def find_all(self, name: str) -> List["DomNode"]:
        """Return every descendant element with the given tag name, in document order."""
        found: List[DomNode] = []
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            if node.type == "tag" and node.name == name:
                found.append(node)
            stack.extend(reversed(node.children))
        return found


@dataclass
class StyleNode:
    """Rule, at-rule, declaration or comment of a stylesheet rule tree."""

    type: str
    name: Optional[str] = None
    prelude: Optional[str] = None
    value: Optional[str] = None
    important: bool = False
    children: List["StyleNode"] = field(default_factory=list)


@dataclass(frozen=True)
class FileRecord:
    """Outcome of processing a single file; immutable once assembled."""

    path: str
    category: ContentCategory
    status: RecordStatus
    source_size: int
    representation: Any = None
    error: Optional[str] = None
    summary: Optional[str] = None
    reason: Optional[str] = None
    source: Optional[str] = None

    @property
    def skipped(self) -> bool:
        return self.status is RecordStatus.SKIPPED

    def to_entry(self) -> Dict[str, Any]:
        """Return the output-document entry for this record."""
        entry: Dict[str, Any] = {
            "file": self.path,
            "type": self.category.value,
            "size": self.source_size,
        }
        if self.status is RecordStatus.SKIPPED:
            entry["skipped"] = True
            entry["reason"] = self.reason
        elif self.status is RecordStatus.ERROR:
            entry["error"] = self.error
        else:
            key = REPRESENTATION_KEYS[self.category]
            representation = self.representation
            if isinstance(representation, SchemaNode):
                representation = representation.to_output()
            entry[key] = representation
        if self.summary is not None:
            entry["summary"] = self.summary
        if self.source is not None:
            entry["sourceCode"] = self.source
        return entry


@dataclass(frozen=True)
class RepositoryMetadata:
    """Descriptive fields of a remote repository."""

    name: str
    description: Optional[str] = None
    link: Optional[str] = None


@dataclass(frozen=True)
class Aggregate:
    """Full result of one pipeline run."""

    metadata: Optional[RepositoryMetadata]
    files: Tuple[FileRecord, ...]

    def to_document(self) -> Dict[str, Any]:
        """Return the output document; representations are left as object graphs."""
        metadata = None
        if self.metadata is not None:
            metadata = {
                "name": self.metadata.name,
                "description": self.metadata.description,
                "demoLink": self.metadata.link,
            }
        return {
            "metadata": metadata,
            "files": [record.to_entry() for record in self.files],
        }


REPRESENTATION_KEYS: Dict[ContentCategory, str] = {
    ContentCategory.SCRIPT: "ast",
    ContentCategory.STRUCTURED_DATA: "ast",
    ContentCategory.MARKUP: "dom",
    ContentCategory.PROSE: "dom",
    ContentCategory.STYLESHEET: "cssAst",
}
