"""
File change watchers - turn file system activity into FileEvents.

Two implementations:
- WatchdogWatcher: native notifications through watchdog's Observer
- PollingWatcher: compares os.stat() results between polls, for file
  systems where notifications are unreliable (network mounts, containers)

Both hand their events to an IndexUpdater when one is given, otherwise
apply them to the engine directly.
"""

import logging
import os
import threading
from pathlib import Path
from typing import Optional

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .indexer import IndexUpdater, iter_indexable_files, should_ignore
from .models import EventType, FileEvent
from .scanner import compute_file_hash

logger = logging.getLogger(__name__)


def summarize(events: list[FileEvent]) -> dict:
    """Summarize events into counts."""
    by_type: dict[str, int] = {}
    for e in events:
        by_type[e.event_type.value] = by_type.get(e.event_type.value, 0) + 1
    return {
        "total": len(events),
        "by_type": by_type,
    }


class _Dispatcher:
    """Routes events to the updater queue, or straight to the engine."""

    def __init__(self, engine, updater: Optional[IndexUpdater] = None):
        self.engine = engine
        self.updater = updater

    def dispatch(self, event: FileEvent) -> None:
        if self.updater is not None:
            self.updater.submit(event)
        else:
            self.engine.apply(event)


class PollingWatcher(_Dispatcher):
    """Detect changes by comparing (mtime, size) snapshots between polls."""

    def __init__(self, engine, updater: Optional[IndexUpdater] = None):
        super().__init__(engine, updater)
        self._snapshot: dict[str, tuple[int, int]] = self._take_snapshot()

    def _take_snapshot(self) -> dict[str, tuple[int, int]]:
        snapshot = {}
        for identity, file_path in iter_indexable_files(
            self.engine.project_root,
            self.engine.scanner.supported_extensions,
            self.engine.config.ignore_patterns,
        ):
            try:
                st = file_path.stat()
            except OSError:
                continue
            snapshot[identity] = (st.st_mtime_ns, st.st_size)
        return snapshot

    def detect_changes(self) -> list[FileEvent]:
        """
        Compare the disk with the previous snapshot.

        A deleted file and a new file with the same content are reported
        as one RENAMED event.
        """
        current = self._take_snapshot()
        previous = self._snapshot
        self._snapshot = current

        created = sorted(set(current) - set(previous))
        deleted = sorted(set(previous) - set(current))
        modified = sorted(
            p for p in set(current) & set(previous)
            if current[p] != previous[p]
        )

        events: list[FileEvent] = []
        if created and deleted:
            created, deleted, renames = self._match_renames(created, deleted)
            events.extend(renames)

        events.extend(FileEvent.created(p) for p in created)
        events.extend(FileEvent.modified(p) for p in modified)
        events.extend(FileEvent.deleted(p) for p in deleted)
        return events

    def _match_renames(self, created, deleted):
        old_hashes: dict[str, str] = {}
        for identity in deleted:
            index = self.engine.file_index(identity)
            if index is not None and index.content_hash:
                old_hashes.setdefault(index.content_hash, identity)

        renames = []
        still_created = []
        for identity in created:
            try:
                content_hash = compute_file_hash((self.engine.project_root / identity).read_bytes())
            except OSError:
                still_created.append(identity)
                continue
            old_identity = old_hashes.pop(content_hash, None)
            if old_identity is None:
                still_created.append(identity)
            else:
                renames.append(FileEvent.renamed(old_identity, identity))

        renamed_from = {e.identity for e in renames}
        still_deleted = [p for p in deleted if p not in renamed_from]
        return still_created, still_deleted, renames

    def poll(self) -> list[FileEvent]:
        """Detect changes and dispatch them."""
        events = self.detect_changes()
        for event in events:
            self.dispatch(event)
        if events:
            logger.info(f"Detected changes: {summarize(events)['by_type']}")
        return events

    def run(self, interval: Optional[float] = None, stop_event: Optional[threading.Event] = None) -> None:
        """Poll until stop_event is set."""
        interval = interval or self.engine.config.poll_interval
        stop_event = stop_event or threading.Event()
        while not stop_event.wait(interval):
            self.poll()


class IndexerHandler(FileSystemEventHandler):
    """
    Translates watchdog events into FileEvents.

    A directory that disappears or moves is expanded into one event per
    file indexed below it, since watchdog may not report those files
    (a directory moved out of the root only shows up as a delete).
    """

    def __init__(self, watcher: "WatchdogWatcher"):
        self.watcher = watcher

    def _identity(self, src_path) -> Optional[str]:
        engine = self.watcher.engine
        identity = engine.identity_for(os.fsdecode(src_path))
        # the root itself, or a path outside it
        if os.path.isabs(identity) or identity in (".", ""):
            return None
        if should_ignore(identity, engine.config.ignore_patterns):
            return None
        return identity

    def _indexed_under(self, directory: str) -> list[str]:
        prefix = f"{directory}/"
        return [i for i in self.watcher.engine.store.identities() if i.startswith(prefix)]

    def on_created(self, event):
        if event.is_directory:
            self._on_directory_created(event.src_path)
            return
        self._on_changed(event, EventType.CREATED)

    def on_modified(self, event):
        if event.is_directory:
            return
        self._on_changed(event, EventType.MODIFIED)

    def _on_changed(self, event, event_type: EventType):
        identity = self._identity(event.src_path)
        if identity is None or not self.watcher.engine.is_indexable(identity):
            return
        self.watcher.dispatch(FileEvent(event_type, identity))

    def _on_directory_created(self, src_path):
        """Index the files of a directory that appeared in one piece."""
        directory = Path(os.fsdecode(src_path))
        if self._identity(directory) is None or not directory.is_dir():
            return
        engine = self.watcher.engine
        for _, file_path in iter_indexable_files(directory, engine.scanner.supported_extensions):
            identity = self._identity(file_path)
            if identity is not None:
                self.watcher.dispatch(FileEvent.created(identity))

    def on_deleted(self, event):
        identity = self._identity(event.src_path)
        if identity is None:
            return
        if event.is_directory:
            for child in self._indexed_under(identity):
                self.watcher.dispatch(FileEvent.deleted(child))
            return
        self.watcher.dispatch(FileEvent.deleted(identity))

    def on_moved(self, event):
        old_identity = self._identity(event.src_path)
        new_identity = self._identity(event.dest_path)
        if event.is_directory:
            self._on_directory_moved(old_identity, new_identity, event.dest_path)
            return
        if old_identity is None and new_identity is None:
            return
        if old_identity is None:
            if self.watcher.engine.is_indexable(new_identity):
                self.watcher.dispatch(FileEvent.created(new_identity))
            return
        if new_identity is None:
            self.watcher.dispatch(FileEvent.deleted(old_identity))
            return
        self.watcher.dispatch(FileEvent.renamed(old_identity, new_identity))

    def _on_directory_moved(self, old_identity, new_identity, dest_path):
        if old_identity is None:
            if new_identity is not None:
                self._on_directory_created(dest_path)
            return
        for child in self._indexed_under(old_identity):
            moved_to = None if new_identity is None else new_identity + child[len(old_identity):]
            if moved_to is None or should_ignore(moved_to, self.watcher.engine.config.ignore_patterns):
                self.watcher.dispatch(FileEvent.deleted(child))
            else:
                self.watcher.dispatch(FileEvent.renamed(child, moved_to))


class WatchdogWatcher(_Dispatcher):
    """Native file system notifications for one project root."""

    def __init__(self, engine, updater: Optional[IndexUpdater] = None):
        super().__init__(engine, updater)
        self.handler = IndexerHandler(self)
        self._observer: Optional[Observer] = None

    @property
    def running(self) -> bool:
        return self._observer is not None

    def start(self) -> None:
        if self._observer is not None:
            return
        observer = Observer()
        observer.schedule(self.handler, str(self.engine.project_root), recursive=True)
        observer.start()
        self._observer = observer
        logger.info(f"File watcher started for: {self.engine.project_root}")

    def stop(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join()
        self._observer = None
        logger.info(f"File watcher stopped for: {self.engine.project_root}")


def create_watcher(engine, updater: Optional[IndexUpdater] = None, polling: Optional[bool] = None):
    """Pick a watcher implementation from the engine's config."""
    if polling is None:
        polling = not engine.config.use_watchdog
    if polling:
        return PollingWatcher(engine, updater)
    return WatchdogWatcher(engine, updater)
