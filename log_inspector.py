"""CLI log inspector: list archived dates and print a day's entries."""

import argparse
import json
import os
import sys

from system_logger.archive import Archive
from system_logger.errors import InvalidDate, StorageUnavailable


def format_entry(entry) -> str:
    line = f"{entry.timestamp.isoformat(timespec='milliseconds')} [{entry.level.upper()}] [{entry.category}] {entry.message}"
    if entry.data:
        line += " " + json.dumps(entry.data, default=str)
    return line


def main(argv=None):
    parser = argparse.ArgumentParser(description="Inspect the system log archive")
    parser.add_argument("--archive-dir", default=os.environ.get("ARCHIVE_DIR", "./logs/system"),
                        help="Directory containing daily partitions")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--list", action="store_true", help="List archived dates")
    group.add_argument("--read", metavar="YYYY-MM-DD", help="Print entries for a date")
    parser.add_argument("--level", help="Only print entries with this level")
    parser.add_argument("--category", help="Only print entries with this category")
    args = parser.parse_args(argv)

    archive = Archive(args.archive_dir)

    try:
        if args.list:
            dates = archive.list_partitions()
            if not dates:
                print("No archived logs found.")
                return 0
            for day in dates:
                size = os.path.getsize(archive.partition_path(day))
                print(f"  {day.isoformat()}  ({size} B)")
            return 0

        entries = archive.read_partition(args.read)
    except (InvalidDate, StorageUnavailable) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.level:
        entries = [e for e in entries if e.level == args.level]
    if args.category:
        entries = [e for e in entries if e.category == args.category]
    if not entries:
        print(f"No entries for {args.read}.")
        return 0
    for entry in entries:
        print(format_entry(entry))
    return 0


if __name__ == "__main__":
    sys.exit(main())
