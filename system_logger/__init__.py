"""Append-only system logger with a bounded in-memory window and a date-partitioned archive."""

from system_logger.archive import Archive
from system_logger.errors import InvalidDate, StorageUnavailable, SystemLoggerError
from system_logger.models import LEVELS, LogEntry
from system_logger.store import SystemLogger, get_system_logger, reset_system_logger
from system_logger.writer import ArchiveWriter

__all__ = [
    "Archive",
    "ArchiveWriter",
    "InvalidDate",
    "LEVELS",
    "LogEntry",
    "StorageUnavailable",
    "SystemLogger",
    "SystemLoggerError",
    "get_system_logger",
    "reset_system_logger",
]
