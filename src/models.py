"""
Core data models for the YAML key index.

An entry is a (path, item) pair:
    server        -> ""            (container)
    server/port   -> "8080"        (leaf)
    server        -> "port: 8080"  (prefix annotation, after expansion)
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional


class NodeKind(str, Enum):
    """Shape of a parsed YAML node."""
    MAPPING = "mapping"
    SCALAR = "scalar"
    ABSENT = "absent"            # null / missing value
    UNSUPPORTED = "unsupported"  # sequences, booleans, dates, ...


def classify_node(value) -> NodeKind:
    """Map a value produced by the YAML loader to its NodeKind."""
    if value is None:
        return NodeKind.ABSENT
    if isinstance(value, dict):
        return NodeKind.MAPPING
    # bool is an int subclass but is not a number here
    if isinstance(value, bool):
        return NodeKind.UNSUPPORTED
    if isinstance(value, (str, int, float)):
        return NodeKind.SCALAR
    return NodeKind.UNSUPPORTED


class EventType(str, Enum):
    """File system change kinds that drive the index."""
    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"


class DiagnosticKind(str, Enum):
    PARSE_FAILURE = "parse_failure"
    UNSUPPORTED_NODE = "unsupported_node"
    MISSING_FILE = "missing_file"
    FILE_TOO_LARGE = "file_too_large"


@dataclass(frozen=True)
class ConfigEntry:
    """A key path and the value (or annotation) found there."""
    path: str
    item: str = ""

    @property
    def is_container(self) -> bool:
        return self.item == ""

    def to_dict(self) -> dict:
        return {"path": self.path, "item": self.item}


@dataclass(frozen=True)
class FileIndex:
    """
    All entries extracted from one file.

    Never patched in place: re-indexing builds a new FileIndex and the
    store swaps it in.
    """
    identity: str
    entries: tuple[ConfigEntry, ...] = ()
    content_hash: str = ""
    indexed_at: str = ""  # ISO timestamp

    def paths(self) -> list[str]:
        return [e.path for e in self.entries]

    def entry_set(self) -> frozenset:
        return frozenset(self.entries)

    def with_identity(self, identity: str) -> "FileIndex":
        return replace(self, identity=identity)

    def to_dict(self) -> dict:
        return {
            "identity": self.identity,
            "hash": self.content_hash,
            "entries": [e.to_dict() for e in self.entries],
            "indexed_at": self.indexed_at,
        }


@dataclass(frozen=True)
class FileEvent:
    """
    A change notification, as a command for the index updater.

    contents may carry the new bytes for CREATED/MODIFIED; when it is
    None the file is read from disk.
    """
    event_type: EventType
    identity: str
    contents: Optional[bytes] = field(default=None, repr=False, compare=False)
    new_identity: Optional[str] = None

    @classmethod
    def created(cls, identity: str, contents: Optional[bytes] = None) -> "FileEvent":
        return cls(EventType.CREATED, identity, contents)

    @classmethod
    def modified(cls, identity: str, contents: Optional[bytes] = None) -> "FileEvent":
        return cls(EventType.MODIFIED, identity, contents)

    @classmethod
    def deleted(cls, identity: str) -> "FileEvent":
        return cls(EventType.DELETED, identity)

    @classmethod
    def renamed(cls, old_identity: str, new_identity: str) -> "FileEvent":
        return cls(EventType.RENAMED, old_identity, new_identity=new_identity)


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal problem found while indexing one file."""
    identity: str
    kind: DiagnosticKind
    message: str

    def to_dict(self) -> dict:
        return {
            "file": self.identity,
            "kind": self.kind.value,
            "error": self.message,
        }
