"""Date-partitioned archive: one append-only JSONL file per calendar day."""

import json
import logging
import os
import re
import threading
from datetime import date, datetime

import jsonschema

from system_logger.errors import InvalidDate, StorageUnavailable
from system_logger.models import LOG_ENTRY_SCHEMA, LogEntry

logger = logging.getLogger(__name__)

_VALIDATOR = jsonschema.Draft202012Validator(LOG_ENTRY_SCHEMA)

PARTITION_SUFFIX = ".jsonl"
_PARTITION_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})\.jsonl$")


def parse_date(value) -> date:
    """Coerce a date, datetime, or YYYY-MM-DD string to a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.strptime(value.strip(), "%Y-%m-%d").date()
        except ValueError:
            raise InvalidDate(value) from None
    raise InvalidDate(value)


class Archive:
    """Append-only partition store with per-partition write locks."""

    def __init__(self, archive_dir: str):
        self._archive_dir = archive_dir
        self._locks: dict[date, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @property
    def archive_dir(self) -> str:
        return self._archive_dir

    def partition_path(self, day) -> str:
        day = parse_date(day)
        return os.path.join(self._archive_dir, day.isoformat() + PARTITION_SUFFIX)

    def _lock_for(self, day: date) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(day)
            if lock is None:
                lock = self._locks[day] = threading.Lock()
            return lock

    def append(self, entry: LogEntry) -> None:
        """Append one entry to its day's partition. Raises StorageUnavailable."""
        day = entry.partition_date
        path = self.partition_path(day)
        line = json.dumps(entry.to_dict(), default=str, ensure_ascii=False) + "\n"

        with self._lock_for(day):
            try:
                os.makedirs(self._archive_dir, exist_ok=True)
                with open(path, "a", encoding="utf-8") as f:
                    f.write(line)
            except OSError as e:
                raise StorageUnavailable(path, e) from e

    def list_partitions(self) -> list[date]:
        """Dates with persisted entries, newest first."""
        try:
            names = os.listdir(self._archive_dir)
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StorageUnavailable(self._archive_dir, e) from e

        dates = []
        for name in names:
            match = _PARTITION_RE.match(name)
            if not match:
                continue
            try:
                day = date.fromisoformat(match.group(1))
            except ValueError:
                continue
            try:
                if os.path.getsize(os.path.join(self._archive_dir, name)) == 0:
                    continue
            except OSError:
                continue
            dates.append(day)
        dates.sort(reverse=True)
        return dates

    def read_partition(self, day) -> list[LogEntry]:
        """All entries of a day, oldest first. A missing partition reads as empty."""
        path = self.partition_path(day)
        entries = []
        try:
            with open(path, "r", encoding="utf-8", errors="replace") as f:
                for line_num, line in enumerate(f, 1):
                    line = line.strip()
                    if not line:
                        continue
                    entry = self._parse_line(line)
                    if entry is None:
                        logger.warning("Skipping malformed record %s:%d", path, line_num)
                        continue
                    entries.append(entry)
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StorageUnavailable(path, e) from e
        return entries

    @staticmethod
    def _parse_line(line: str) -> LogEntry | None:
        try:
            raw = json.loads(line)
        except ValueError:
            return None
        if not _VALIDATOR.is_valid(raw):
            return None
        try:
            return LogEntry.from_dict(raw)
        except ValueError:
            return None
