"""Log entry model with dict conversion and the JSON schema of archived records."""

from dataclasses import dataclass
from datetime import date, datetime

LEVELS = ("info", "success", "warning", "error", "debug")

LOG_ENTRY_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["id", "timestamp", "level", "category", "message"],
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "timestamp": {"type": "string"},
        "level": {"enum": list(LEVELS)},
        "category": {"type": "string"},
        "message": {"type": "string"},
        "data": {"type": "object"},
    },
}


def format_timestamp(ts: datetime) -> str:
    return ts.isoformat(timespec="milliseconds")


def truncate_to_millis(ts: datetime) -> datetime:
    return ts.replace(microsecond=(ts.microsecond // 1000) * 1000)


@dataclass(frozen=True)
class LogEntry:
    id: str
    timestamp: datetime
    level: str
    category: str
    message: str
    data: dict | None = None

    @property
    def partition_date(self) -> date:
        """Calendar date of the entry in its own UTC offset."""
        return self.timestamp.date()

    def to_dict(self) -> dict:
        result = {
            "id": self.id,
            "timestamp": format_timestamp(self.timestamp),
            "level": self.level,
            "category": self.category,
            "message": self.message,
        }
        if self.data:
            result["data"] = self.data
        return result

    @classmethod
    def from_dict(cls, raw: dict) -> "LogEntry":
        """Rebuild an entry from its serialized form.

        Raises ValueError if a required field is missing or the timestamp
        cannot be parsed.
        """
        try:
            timestamp = datetime.fromisoformat(raw["timestamp"])
            return cls(
                id=raw["id"],
                timestamp=timestamp,
                level=raw["level"],
                category=raw["category"],
                message=raw["message"],
                data=raw.get("data") or None,
            )
        except KeyError as e:
            raise ValueError(f"Missing field: {e.args[0]}") from e
        except TypeError as e:
            raise ValueError(f"Invalid timestamp: {raw.get('timestamp')!r}") from e
