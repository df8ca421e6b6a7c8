"""
YAML Key Index - live index of the key paths found in a project's YAML files.

Usage:
    from yamlkey_index import KeyIndexEngine

    engine = KeyIndexEngine("/path/to/project")

    # Initial scan
    engine.scan()

    # Keep it up to date from file system events
    engine.apply(FileEvent.modified("config/app.yaml"))

    # Query
    for entry in engine.query("server."):
        print(entry.path, entry.item)
"""

from .config import IndexerConfig
from .engine import KeyIndexEngine
from .models import ConfigEntry, Diagnostic, DiagnosticKind, EventType, FileEvent, FileIndex
from .store import IndexStore

__version__ = "0.1.0"
__all__ = [
    "KeyIndexEngine",
    "IndexerConfig",
    "IndexStore",
    "ConfigEntry",
    "FileIndex",
    "FileEvent",
    "EventType",
    "Diagnostic",
    "DiagnosticKind",
]
