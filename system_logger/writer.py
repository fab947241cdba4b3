"""Background archive writer: decouples ingestion from disk latency."""

import logging
import queue
import threading
import time

from system_logger.archive import Archive
from system_logger.errors import StorageUnavailable
from system_logger.models import LogEntry

logger = logging.getLogger(__name__)


class _FlushMarker:
    """Queue item that signals once every entry ahead of it has been processed."""

    def __init__(self):
        self.done = threading.Event()


_STOP = object()


class ArchiveWriter:
    """Single-consumer queue in front of an Archive.

    Producers call submit() and never wait on I/O; one daemon thread appends
    entries in submission order, so per-partition ordering is preserved.
    Write failures are logged and counted, never raised to producers.
    """

    def __init__(self, archive: Archive, queue_size: int = 10000):
        self._archive = archive
        self._queue: queue.Queue = queue.Queue(maxsize=queue_size)
        self._state_lock = threading.Lock()
        self._stats_lock = threading.Lock()
        self._closed = False
        self._written = 0
        self._failed = 0
        self._dropped = 0
        self._thread = threading.Thread(
            target=self._consumer_loop, name="archive-writer", daemon=True,
        )
        self._thread.start()

    @property
    def archive(self) -> Archive:
        return self._archive

    @property
    def closed(self) -> bool:
        return self._closed

    def submit(self, entry: LogEntry) -> bool:
        """Queue an entry for archiving. Returns False if it was not queued."""
        with self._state_lock:
            if self._closed:
                reason = "writer closed"
            else:
                try:
                    self._queue.put_nowait(entry)
                    return True
                except queue.Full:
                    reason = "queue full"
        with self._stats_lock:
            self._dropped += 1
        logger.warning("Archive %s, dropping entry %s", reason, entry.id)
        return False

    def flush(self, timeout: float | None = None) -> bool:
        """Wait until entries submitted before this call are archived.

        Returns False if the wait timed out.
        """
        if self._closed:
            return not self._thread.is_alive()
        deadline = None if timeout is None else time.monotonic() + timeout
        marker = _FlushMarker()
        try:
            self._queue.put(marker, timeout=timeout)
        except queue.Full:
            return False
        remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
        return marker.done.wait(remaining)

    def close(self, timeout: float = 5.0):
        """Stop accepting entries, drain the queue, and join the worker."""
        with self._state_lock:
            if self._closed:
                return
            self._closed = True
        try:
            self._queue.put(_STOP, timeout=timeout)
        except queue.Full:
            logger.error("Archive writer could not drain within %.1fs", timeout)
            return
        self._thread.join(timeout=timeout)
        stats = self.stats()
        logger.info(
            "Archive writer closed: written=%d, failed=%d, dropped=%d",
            stats["written"], stats["failed"], stats["dropped"],
        )

    def stats(self) -> dict:
        with self._stats_lock:
            return {
                "written": self._written,
                "failed": self._failed,
                "dropped": self._dropped,
                "pending": self._queue.qsize(),
            }

    def _consumer_loop(self):
        while True:
            item = self._queue.get()
            if item is _STOP:
                self._drain_queue()
                return
            self._handle(item)

    def _drain_queue(self):
        """Process anything enqueued behind the stop sentinel."""
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                return
            self._handle(item)

    def _handle(self, item):
        if isinstance(item, _FlushMarker):
            item.done.set()
        else:
            self._write(item)

    def _write(self, entry: LogEntry):
        try:
            self._archive.append(entry)
        except StorageUnavailable as e:
            with self._stats_lock:
                self._failed += 1
            logger.error("Failed to archive entry %s: %s", entry.id, e)
        except (TypeError, ValueError) as e:
            with self._stats_lock:
                self._failed += 1
            logger.error("Could not serialize entry %s: %s", entry.id, e)
        else:
            with self._stats_lock:
                self._written += 1
