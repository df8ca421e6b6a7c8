"""
Main indexing engine - owns one project's key index.

Usage:
1. engine.scan() - Index every YAML file under the root
2. engine.apply(event) / index_file / remove_file / rename_file - Keep it live
3. engine.get_keys() / engine.query(prefix) - Read the merged key set
"""

import logging
import threading
from collections import deque
from pathlib import Path
from typing import Optional, Union

from .config import IndexerConfig
from .indexer import ChangeSet, detect_changes, iter_indexable_files, scan_directory_hashes
from .mapper import build_key_map, filter_keys
from .models import ConfigEntry, Diagnostic, DiagnosticKind, EventType, FileEvent, FileIndex
from .scanner import ScanResult, YamlScanner
from .store import IndexStore

logger = logging.getLogger(__name__)

MAX_DIAGNOSTICS = 500


class KeyIndexEngine:
    """
    Key indexing engine

    Main features:
    1. scan() - Initial full scan
    2. index_file() / remove_file() / rename_file() / apply() - Lifecycle hooks
    3. get_keys() / query() - Merged, expanded key set
    """

    def __init__(
        self,
        project_root: Union[str, Path],
        config: Optional[IndexerConfig] = None,
        store: Optional[IndexStore] = None,
        scanner: Optional[YamlScanner] = None,
    ):
        self.project_root = Path(project_root).resolve()
        self.config = config or IndexerConfig()
        self.store = store if store is not None else IndexStore()
        self.scanner = scanner or YamlScanner(self.config.extensions)
        self.diagnostics: deque[Diagnostic] = deque(maxlen=MAX_DIAGNOSTICS)

        self._keys_lock = threading.Lock()
        self._keys_version = -1
        self._keys: list[ConfigEntry] = []

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def scan(self, show_progress: bool = False) -> dict:
        """
        Index every matching file under the project root.

        A file that fails to parse gets an empty index; it never stops
        the scan.

        Returns:
            Scan result summary
        """
        files = list(iter_indexable_files(
            self.project_root,
            self.scanner.supported_extensions,
            self.config.ignore_patterns,
        ))

        iterator = files
        if show_progress:
            from tqdm import tqdm
            iterator = tqdm(files, desc="Indexing", unit="file")

        result = ScanResult()
        for identity, file_path in iterator:
            result.files_scanned += 1
            index, diagnostics = self._index_path(identity, file_path)
            if index is not None:
                result.add_file_result(index, diagnostics)
            else:
                for d in diagnostics:
                    result.add_diagnostic(d)

        summary = result.summary()
        logger.info(
            f"Indexed {summary['files_indexed']} files under {self.project_root} "
            f"({summary['entries_found']} entries, {summary['errors']} errors)"
        )
        return {
            "root": str(self.project_root),
            **summary,
            "diagnostics": result.errors(),
        }

    def refresh(self) -> ChangeSet:
        """
        Bring the index in line with the disk without trusting events.

        Only files whose content hash changed are parsed again.
        """
        current = scan_directory_hashes(
            self.project_root,
            self.scanner.supported_extensions,
            self.config.ignore_patterns,
        )
        indexed = {index.identity: index.content_hash for index in self.store.all()}
        changes = detect_changes(indexed, current)

        for identity in changes.all_changed():
            self.index_file(identity)
        for identity in changes.deleted:
            self.remove_file(identity)

        if not changes.is_empty():
            logger.info(f"Refreshed {self.project_root}: {changes.summary()}")
        return changes

    # ------------------------------------------------------------------
    # Lifecycle hooks
    # ------------------------------------------------------------------

    def is_indexable(self, identity: str) -> bool:
        return self.scanner.can_scan(identity)

    def identity_for(self, path: Union[str, Path]) -> str:
        """Identity of a file: its POSIX path relative to the project root."""
        path = Path(path)
        if path.is_absolute():
            try:
                return path.relative_to(self.project_root).as_posix()
            except ValueError:
                return path.as_posix()
        return path.as_posix()

    def index_file(self, identity: str, contents: Optional[bytes] = None) -> Optional[FileIndex]:
        """
        (Re)build the index of one file and swap it into the store.

        Args:
            identity: file identity
            contents: file bytes; read from disk when None

        Returns:
            The new FileIndex, or None if the file is not a YAML file,
            is too large or could not be read
        """
        if not self.is_indexable(identity):
            return None

        if contents is None:
            index, _ = self._index_path(identity, self.project_root / identity)
            return index

        if self._check_size(identity, len(contents)) is not None:
            return None
        index, _ = self._index_contents(identity, contents)
        return index

    def remove_file(self, identity: str) -> bool:
        removed = self.store.remove(identity)
        if removed:
            logger.debug(f"Removed {identity} from index")
        return removed

    def rename_file(self, old_identity: str, new_identity: str) -> bool:
        """
        Move a file's index to its new identity.

        A file renamed away from a YAML extension is dropped; a file
        renamed onto one that was never indexed is indexed from disk.
        """
        if not self.is_indexable(new_identity):
            return self.store.remove(old_identity)
        moved = self.store.rename(old_identity, new_identity)
        if not moved:
            return self.index_file(new_identity) is not None
        return True

    def apply(self, event: FileEvent) -> None:
        """Apply one change notification."""
        if event.event_type in (EventType.CREATED, EventType.MODIFIED):
            self.index_file(event.identity, event.contents)
        elif event.event_type == EventType.DELETED:
            self.remove_file(event.identity)
        elif event.event_type == EventType.RENAMED:
            self.rename_file(event.identity, event.new_identity)
        else:
            raise ValueError(f"Unknown event type: {event.event_type}")

    def close(self) -> None:
        """Discard the index (project closed)."""
        self.store.clear()
        with self._keys_lock:
            self._keys_version = -1
            self._keys = []

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_keys(self) -> list[ConfigEntry]:
        """
        Every known key path with its merged item, sorted by path.

        Recomputed only when the store changed since the last call.
        """
        version, indexes = self.store.snapshot()
        with self._keys_lock:
            if version == self._keys_version:
                return list(self._keys)

        keys = sorted(build_key_map(indexes).values(), key=lambda e: e.path)

        with self._keys_lock:
            if version >= self._keys_version:
                self._keys_version = version
                self._keys = keys
        return list(keys)

    def query(self, prefix: str = "") -> list[ConfigEntry]:
        """Keys starting with prefix ('.' or '/' separated)."""
        return filter_keys(self.get_keys(), prefix)

    def file_index(self, identity: str) -> Optional[FileIndex]:
        return self.store.get(identity)

    def stats(self) -> dict:
        indexes = self.store.all()
        return {
            "root": str(self.project_root),
            "files": len(indexes),
            "entries": sum(len(i.entries) for i in indexes),
            "keys": len(self.get_keys()),
            "diagnostics": len(self.diagnostics),
        }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _index_path(self, identity: str, file_path: Path) -> tuple[Optional[FileIndex], list[Diagnostic]]:
        try:
            too_large = self._check_size(identity, file_path.stat().st_size)
            if too_large is not None:
                return None, [too_large]
            contents = file_path.read_bytes()
        except OSError as e:
            # deleted or moved before we got to it; the delete event follows
            diagnostic = Diagnostic(identity, DiagnosticKind.MISSING_FILE, str(e))
            logger.info(f"Cannot read {identity}, skipping: {e}")
            self.diagnostics.append(diagnostic)
            return None, [diagnostic]
        return self._index_contents(identity, contents)

    def _check_size(self, identity: str, size: int) -> Optional[Diagnostic]:
        if size <= self.config.max_file_size:
            return None
        diagnostic = Diagnostic(
            identity,
            DiagnosticKind.FILE_TOO_LARGE,
            f"File too large: {size:,} bytes (max {self.config.max_file_size:,})",
        )
        logger.warning(f"Skipping {identity}: {diagnostic.message}")
        self.diagnostics.append(diagnostic)
        return diagnostic

    def _index_contents(self, identity: str, contents: bytes) -> tuple[FileIndex, list[Diagnostic]]:
        index, diagnostics = self.scanner.scan_file(identity, contents)
        self.diagnostics.extend(diagnostics)
        self.store.put(identity, index)
        logger.debug(f"Indexed {identity}: {len(index.entries)} entries")
        return index, diagnostics
