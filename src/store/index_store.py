"""
In-memory index store: file identity -> FileIndex.

One store per project. Every operation holds the same lock, and
FileIndex values are immutable, so a snapshot never sees a
half-written index.
"""

import logging
import threading
from typing import Optional

from ..models import FileIndex

logger = logging.getLogger(__name__)


class IndexStore:
    """Thread-safe mapping of file identity to its FileIndex."""

    def __init__(self):
        self._indexes: dict[str, FileIndex] = {}
        self._lock = threading.Lock()
        self._version = 0

    @property
    def version(self) -> int:
        """Bumped on every effective mutation."""
        with self._lock:
            return self._version

    def put(self, identity: str, index: FileIndex) -> None:
        """Insert or replace the index of a file."""
        if index.identity != identity:
            index = index.with_identity(identity)
        with self._lock:
            self._indexes[identity] = index
            self._version += 1

    def remove(self, identity: str) -> bool:
        """Remove a file's index. Unknown identities are ignored."""
        with self._lock:
            if identity not in self._indexes:
                return False
            del self._indexes[identity]
            self._version += 1
        return True

    def rename(self, old_identity: str, new_identity: str) -> bool:
        """
        Move a file's index to a new identity.

        Returns False (and changes nothing) if old_identity is unknown.
        """
        with self._lock:
            index = self._indexes.pop(old_identity, None)
            if index is None:
                return False
            self._indexes[new_identity] = index.with_identity(new_identity)
            self._version += 1
        logger.debug(f"Moved index {old_identity} -> {new_identity}")
        return True

    def get(self, identity: str) -> Optional[FileIndex]:
        with self._lock:
            return self._indexes.get(identity)

    def identities(self) -> list[str]:
        with self._lock:
            return sorted(self._indexes)

    def all(self) -> list[FileIndex]:
        """Snapshot of every FileIndex, ordered by identity."""
        return self.snapshot()[1]

    def snapshot(self) -> tuple[int, list[FileIndex]]:
        """(version, indexes) taken atomically."""
        with self._lock:
            return self._version, [self._indexes[k] for k in sorted(self._indexes)]

    def clear(self) -> None:
        with self._lock:
            if self._indexes:
                self._indexes.clear()
                self._version += 1

    def __contains__(self, identity: str) -> bool:
        with self._lock:
            return identity in self._indexes

    def __len__(self) -> int:
        with self._lock:
            return len(self._indexes)
