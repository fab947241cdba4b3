"""Tests for the background archive writer."""

import threading
import time
from datetime import date

from system_logger.errors import StorageUnavailable
from system_logger.writer import ArchiveWriter


class FailingArchive:
    def __init__(self, fail_ids=()):
        self.fail_ids = set(fail_ids)
        self.appended = []

    def append(self, entry):
        if entry.id in self.fail_ids:
            raise StorageUnavailable("/dev/null", OSError("disk full"))
        self.appended.append(entry)


class BlockingArchive:
    """Archive whose appends wait until released."""

    def __init__(self):
        self.release = threading.Event()
        self.appended = []

    def append(self, entry):
        self.release.wait(5)
        self.appended.append(entry)


class SlowArchive:
    def __init__(self, delay):
        self.delay = delay
        self.appended = []

    def append(self, entry):
        time.sleep(self.delay)
        self.appended.append(entry)


class TestSubmit:
    def test_entries_reach_archive_in_order(self, archive, make_entry):
        writer = ArchiveWriter(archive)
        entries = [make_entry(n) for n in range(50)]
        for entry in entries:
            assert writer.submit(entry) is True
        assert writer.flush(timeout=5) is True
        assert archive.read_partition(date(2025, 3, 14)) == entries
        writer.close()

    def test_full_queue_drops_without_blocking(self, make_entry):
        archive = BlockingArchive()
        writer = ArchiveWriter(archive, queue_size=2)
        results = [writer.submit(make_entry(n)) for n in range(10)]
        assert results.count(False) >= 7
        assert writer.stats()["dropped"] == results.count(False)
        archive.release.set()
        writer.close()

    def test_submit_after_close_refused(self, archive, make_entry):
        writer = ArchiveWriter(archive)
        writer.close()
        assert writer.submit(make_entry(1)) is False
        assert writer.stats()["dropped"] == 1


class TestFailures:
    def test_failure_logged_and_processing_continues(self, caplog, make_entry):
        archive = FailingArchive(fail_ids={"id-1"})
        writer = ArchiveWriter(archive)
        for n in range(3):
            writer.submit(make_entry(n))
        writer.flush(timeout=5)

        assert [e.id for e in archive.appended] == ["id-0", "id-2"]
        stats = writer.stats()
        assert stats["failed"] == 1
        assert stats["written"] == 2
        assert "Failed to archive entry id-1" in caplog.text
        writer.close()


class TestFlushAndClose:
    def test_flush_times_out_while_blocked(self, make_entry):
        archive = BlockingArchive()
        writer = ArchiveWriter(archive)
        writer.submit(make_entry(1))
        assert writer.flush(timeout=0.1) is False
        archive.release.set()
        assert writer.flush(timeout=5) is True
        writer.close()

    def test_close_drains_pending_entries(self, archive, make_entry):
        writer = ArchiveWriter(archive)
        for n in range(20):
            writer.submit(make_entry(n))
        writer.close()
        assert len(archive.read_partition("2025-03-14")) == 20
        assert writer.stats()["pending"] == 0

    def test_close_is_idempotent(self, archive):
        writer = ArchiveWriter(archive)
        writer.close()
        writer.close()
        assert writer.closed is True

    def test_flush_timeout_is_one_deadline(self, make_entry):
        # Queue slot frees after ~0.3s; the second entry needs another 0.3s.
        writer = ArchiveWriter(SlowArchive(0.3), queue_size=1)
        writer.submit(make_entry(1))
        while writer.stats()["pending"]:
            time.sleep(0.01)
        writer.submit(make_entry(2))

        start = time.monotonic()
        assert writer.flush(timeout=0.4) is False
        assert time.monotonic() - start < 0.55
        writer.close()
