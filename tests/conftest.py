from datetime import date, datetime, timedelta, timezone

import pytest

from system_logger.archive import Archive
from system_logger.models import LogEntry
from system_logger.store import SystemLogger


class FakeClock:
    """Manually advanced clock returning aware datetimes."""

    def __init__(self, start=None):
        self.now = start or datetime(2025, 3, 14, 9, 30, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def archive_dir(tmp_path):
    return str(tmp_path / "archive")


@pytest.fixture
def archive(archive_dir):
    return Archive(archive_dir)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(archive, clock):
    logger = SystemLogger(archive, time_func=clock)
    yield logger
    logger.close()


def _make_entry(n, day=date(2025, 3, 14), level="info", category="sync", data=None):
    ts = datetime(day.year, day.month, day.day, 12, 0, tzinfo=timezone.utc) + timedelta(milliseconds=n)
    return LogEntry(id=f"id-{n}", timestamp=ts, level=level, category=category,
                    message=f"message {n}", data=data)


@pytest.fixture
def make_entry():
    """Factory for archived-style entries on a fixed day."""
    return _make_entry
