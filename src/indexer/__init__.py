"""Indexer module exports."""

from .incremental import (
    ChangeSet,
    detect_changes,
    iter_indexable_files,
    scan_directory_hashes,
    should_ignore,
)
from .updater import IndexUpdater

__all__ = [
    "ChangeSet",
    "IndexUpdater",
    "detect_changes",
    "iter_indexable_files",
    "scan_directory_hashes",
    "should_ignore",
]
