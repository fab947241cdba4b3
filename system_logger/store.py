"""SystemLogger: bounded in-memory window of recent entries backed by the archive."""

import collections
import copy
import logging
import threading
import uuid
from datetime import date, datetime

from system_logger.archive import Archive
from system_logger.config import Config, load_config
from system_logger.models import LEVELS, LogEntry, truncate_to_millis
from system_logger.writer import ArchiveWriter

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 1000


def _local_now() -> datetime:
    return datetime.now().astimezone()


class SystemLogger:
    """Thread-safe log store.

    Entries land in a bounded deque (oldest evicted first) and are handed
    to an ArchiveWriter for durable, date-partitioned storage. Deletions
    only touch the in-memory window; the archive is history.
    """

    def __init__(self, archive: Archive | str, max_entries: int = DEFAULT_MAX_ENTRIES,
                 queue_size: int = 10000, flush_timeout: float = 2.0, time_func=None):
        if isinstance(archive, str):
            archive = Archive(archive)
        self._archive = archive
        self._writer = ArchiveWriter(archive, queue_size=queue_size)
        self._flush_timeout = flush_timeout
        self._time_func = time_func or _local_now
        self._logs: collections.deque[LogEntry] = collections.deque(maxlen=max_entries)
        self._lock = threading.Lock()
        self._last_timestamp: datetime | None = None
        self._total_count = 0
        self.config: Config | None = None

    @classmethod
    def from_config(cls, config: Config) -> "SystemLogger":
        instance = cls(
            config.archive_dir,
            max_entries=config.max_entries,
            queue_size=config.queue_size,
            flush_timeout=config.flush_timeout_seconds,
        )
        instance.config = config
        return instance

    @property
    def max_entries(self) -> int:
        return self._logs.maxlen

    @property
    def archive(self) -> Archive:
        return self._archive

    @property
    def total_count(self) -> int:
        """Number of entries ever ingested, including evicted and deleted ones."""
        return self._total_count

    def _next_timestamp(self) -> datetime:
        """Current time in ms precision, never earlier than the previous entry.

        Must be called with self._lock held.
        """
        now = truncate_to_millis(self._time_func())
        if self._last_timestamp is not None and now < self._last_timestamp:
            now = self._last_timestamp
        self._last_timestamp = now
        return now

    def log(self, level: str, category: str, message: str, data: dict | None = None) -> LogEntry:
        """Record an event and queue it for archiving. Returns the new entry."""
        level = str(level).lower()
        if level not in LEVELS:
            raise ValueError(f"Unknown log level {level!r}, expected one of {', '.join(LEVELS)}")
        payload = copy.deepcopy(data) if data else None

        with self._lock:
            entry = LogEntry(
                id=uuid.uuid4().hex,
                timestamp=self._next_timestamp(),
                level=level,
                category=str(category),
                message=str(message),
                data=payload,
            )
            self._logs.append(entry)
            self._total_count += 1

        self._writer.submit(entry)
        return entry

    def info(self, category: str, message: str, data: dict | None = None) -> LogEntry:
        return self.log("info", category, message, data)

    def success(self, category: str, message: str, data: dict | None = None) -> LogEntry:
        return self.log("success", category, message, data)

    def warning(self, category: str, message: str, data: dict | None = None) -> LogEntry:
        return self.log("warning", category, message, data)

    def error(self, category: str, message: str, data: dict | None = None) -> LogEntry:
        return self.log("error", category, message, data)

    def debug(self, category: str, message: str, data: dict | None = None) -> LogEntry:
        return self.log("debug", category, message, data)

    def get_logs(self) -> list[LogEntry]:
        """Snapshot of the in-memory window, oldest first."""
        with self._lock:
            return list(self._logs)

    def _sync_archive(self):
        if not self._writer.flush(timeout=self._flush_timeout):
            logger.warning("Archive still has pending writes after %.1fs", self._flush_timeout)

    def get_available_dates(self) -> list[date]:
        """Dates that have archived entries, newest first.

        Raises StorageUnavailable if the archive cannot be listed.
        """
        self._sync_archive()
        return self._archive.list_partitions()

    def read_logs_from_file(self, day) -> list[LogEntry]:
        """Archived entries for *day* (date or YYYY-MM-DD), oldest first.

        Raises InvalidDate for a malformed key and StorageUnavailable if the
        partition cannot be read. A day with no entries returns [].
        """
        self._sync_archive()
        return self._archive.read_partition(day)

    def _delete_where(self, predicate) -> int:
        with self._lock:
            kept = [entry for entry in self._logs if not predicate(entry)]
            removed = len(self._logs) - len(kept)
            if removed:
                self._logs.clear()
                self._logs.extend(kept)
        return removed

    def delete_logs_by_category(self, category: str) -> int:
        """Remove in-memory entries with exactly this category. Returns the count removed."""
        removed = self._delete_where(lambda entry: entry.category == category)
        logger.info("Deleted %d in-memory entries with category %r", removed, category)
        return removed

    def delete_logs_by_level(self, level: str) -> int:
        """Remove in-memory entries with exactly this level. Returns the count removed."""
        removed = self._delete_where(lambda entry: entry.level == level)
        logger.info("Deleted %d in-memory entries with level %r", removed, level)
        return removed

    def clear_logs(self):
        with self._lock:
            self._logs.clear()
        logger.info("Cleared in-memory log window")

    def get_stats(self) -> dict:
        with self._lock:
            by_level = collections.Counter(entry.level for entry in self._logs)
            by_category = collections.Counter(entry.category for entry in self._logs)
            current_size = len(self._logs)
            total = self._total_count
        return {
            "current_size": current_size,
            "max_entries": self._logs.maxlen,
            "total_logged": total,
            "by_level": {level: by_level.get(level, 0) for level in LEVELS},
            "by_category": dict(by_category),
            "archive": self._writer.stats(),
        }

    def close(self, timeout: float = 5.0):
        self._writer.close(timeout=timeout)


_instance: SystemLogger | None = None
_instance_lock = threading.Lock()


def get_system_logger(config: Config | None = None) -> SystemLogger:
    """Return the process-wide SystemLogger, creating it on first use.

    The first call fixes the configuration; a later call with a different
    *config* gets the existing instance and a warning.
    """
    global _instance
    with _instance_lock:
        if _instance is None:
            _instance = SystemLogger.from_config(config or load_config())
            logger.info("System logger started, archive_dir=%s", _instance.archive.archive_dir)
        elif config is not None and config != _instance.config:
            logger.warning(
                "System logger already running with archive_dir=%s, ignoring new config",
                _instance.archive.archive_dir,
            )
        return _instance


def reset_system_logger():
    """Close and discard the process-wide SystemLogger."""
    global _instance
    with _instance_lock:
        if _instance is not None:
            _instance.close()
            _instance = None
