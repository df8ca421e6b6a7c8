"""
Incremental indexing - only update what changed.

1. Enumerate the YAML files under the project root
2. Compare against what the store already holds (content hash)
3. Same hash -> skip, different hash -> re-index, gone -> remove
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

from ..scanner.base import compute_file_hash


@dataclass
class ChangeSet:
    """Files that differ between disk and the index"""
    added: list[str] = field(default_factory=list)
    modified: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.added or self.modified or self.deleted)

    def all_changed(self) -> list[str]:
        return self.added + self.modified

    def summary(self) -> str:
        return f"+{len(self.added)} ~{len(self.modified)} -{len(self.deleted)}"


def should_ignore(rel_path: str, ignore_patterns: list[str]) -> bool:
    """A path is ignored when any of its directory parts matches a pattern"""
    parts = rel_path.split("/")[:-1]
    return any(part in ignore_patterns for part in parts)


def iter_indexable_files(
    root: Path,
    extensions: tuple[str, ...],
    ignore_patterns: list[str] = None,
) -> Iterator[tuple[str, Path]]:
    """
    Walk root and yield every regular file with a matching extension.

    Args:
        root: project root
        extensions: lowercase extensions with dot
        ignore_patterns: directory names to skip

    Yields:
        (identity, full_path), identity being the POSIX path relative to root
    """
    ignore_patterns = ignore_patterns or []
    for file_path in sorted(root.rglob("*")):
        if not file_path.is_file():
            continue
        if file_path.suffix.lower() not in extensions:
            continue
        identity = file_path.relative_to(root).as_posix()
        if should_ignore(identity, ignore_patterns):
            continue
        yield identity, file_path


def scan_directory_hashes(
    root: Path,
    extensions: tuple[str, ...],
    ignore_patterns: list[str] = None,
) -> dict[str, str]:
    """
    Hash every indexable file under root.

    Returns:
        {identity: content_hash}
    """
    result = {}
    for identity, file_path in iter_indexable_files(root, extensions, ignore_patterns):
        try:
            result[identity] = compute_file_hash(file_path.read_bytes())
        except OSError:
            # vanished or unreadable between listing and reading
            continue
    return result


def detect_changes(indexed_hashes: dict[str, str], current_hashes: dict[str, str]) -> ChangeSet:
    """
    Compare the hashes held by the index with the hashes on disk.

    Args:
        indexed_hashes: {identity: content_hash} from the store
        current_hashes: {identity: content_hash} from scan_directory_hashes
    """
    old_paths = set(indexed_hashes)
    new_paths = set(current_hashes)

    return ChangeSet(
        added=sorted(new_paths - old_paths),
        modified=sorted(
            p for p in new_paths & old_paths
            if indexed_hashes[p] != current_hashes[p]
        ),
        deleted=sorted(old_paths - new_paths),
    )
