"""Error kinds raised by the system logger's query path."""


class SystemLoggerError(Exception):
    """Base class for system logger errors."""


class StorageUnavailable(SystemLoggerError):
    """The archive could not be read or written."""

    def __init__(self, path: str, cause: Exception | None = None):
        self.path = path
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Archive storage unavailable at {path}{detail}")


class InvalidDate(SystemLoggerError, ValueError):
    """A partition date key is not a valid YYYY-MM-DD date."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid date {value!r}, expected YYYY-MM-DD")
