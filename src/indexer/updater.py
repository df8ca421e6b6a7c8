"""
Index updater - the single writer of an engine's store.

Watchers submit FileEvents; one worker thread applies them in order, so
file reads and YAML parsing never happen on the query path.
"""

import logging
import queue
import threading
from typing import Optional

from ..models import FileEvent

logger = logging.getLogger(__name__)

_STOP = object()


class IndexUpdater:
    """Queue of FileEvents applied to an engine by one worker thread."""

    def __init__(self, engine):
        self.engine = engine
        self._queue: "queue.Queue" = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._stop_requested = False
        self.applied = 0
        self.failed = 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def submit(self, event: FileEvent) -> None:
        self._queue.put(event)

    def start(self) -> None:
        if self.running:
            return
        self._thread = None
        self._stop_requested = False
        self._thread = threading.Thread(
            target=self._run, name="yamlkey-index-updater", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> bool:
        """
        Apply what is already queued, then stop the worker.

        Returns False if the worker is still busy after timeout; it keeps
        running (and stays the only writer) until it reaches the stop.
        """
        if self._thread is None:
            return True
        if not self._stop_requested:
            self._queue.put(_STOP)
            self._stop_requested = True
        self._thread.join(timeout)
        if self._thread.is_alive():
            logger.warning(f"Index updater still busy after {timeout}s, not stopped yet")
            return False
        self._thread = None
        self._stop_requested = False
        return True

    def join(self) -> None:
        """Block until every submitted event has been applied."""
        self._queue.join()

    def process_pending(self) -> int:
        """
        Apply queued events on the calling thread.

        For hosts that do not run the worker. Returns the number of
        events applied.
        """
        if self.running:
            raise RuntimeError("process_pending() cannot run while the worker thread is running")
        count = 0
        while True:
            try:
                event = self._queue.get_nowait()
            except queue.Empty:
                return count
            try:
                if event is _STOP:
                    continue
                self._apply(event)
                count += 1
            finally:
                self._queue.task_done()

    def _run(self) -> None:
        while True:
            event = self._queue.get()
            try:
                if event is _STOP:
                    return
                self._apply(event)
            finally:
                self._queue.task_done()

    def _apply(self, event: FileEvent) -> None:
        try:
            self.engine.apply(event)
            self.applied += 1
        except Exception as e:
            self.failed += 1
            logger.error(f"Failed to apply {event.event_type.value} event for {event.identity}: {e}")
