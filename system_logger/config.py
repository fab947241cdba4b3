"""Configuration: frozen dataclass built from defaults, a YAML file, then environment variables."""

import logging
import os
from dataclasses import dataclass, fields

import yaml

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Config:
    archive_dir: str = "./logs/system"
    max_entries: int = 1000
    queue_size: int = 10000
    flush_timeout_seconds: float = 2.0
    host: str = "0.0.0.0"
    port: int = 5000
    log_level: str = "INFO"


ENV_VARS = {
    "archive_dir": "ARCHIVE_DIR",
    "max_entries": "MAX_ENTRIES",
    "queue_size": "QUEUE_SIZE",
    "flush_timeout_seconds": "FLUSH_TIMEOUT_SECONDS",
    "host": "HOST",
    "port": "PORT",
    "log_level": "LOG_LEVEL",
}


def _load_yaml(path: str) -> dict:
    """Read a YAML mapping. Missing or invalid files yield an empty dict."""
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        return {}
    except yaml.YAMLError:
        logger.warning("Invalid YAML in %s, using defaults", path)
        return {}
    if not isinstance(data, dict):
        return {}
    # Accept either a flat mapping or one nested under "system_logger".
    return data.get("system_logger", data)


def _coerce(name: str, value, kind):
    if kind is str:
        return str(value)
    try:
        return kind(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid value for {name}: {value!r}") from None


def load_config(path: str | None = None) -> Config:
    """Build Config from defaults, an optional YAML file, and environment variables.

    The YAML path comes from *path* or the ``CONFIG_PATH`` environment
    variable. Environment variables take precedence over the file.
    """
    path = path or os.environ.get("CONFIG_PATH")
    overrides = _load_yaml(path) if path else {}

    values = {}
    for f in fields(Config):
        kind = type(f.default)
        raw = os.environ.get(ENV_VARS[f.name], overrides.get(f.name))
        if raw is not None:
            values[f.name] = _coerce(f.name, raw, kind)

    config = Config(**values)
    if config.max_entries <= 0:
        raise ValueError("max_entries must be positive")
    if config.queue_size <= 0:
        raise ValueError("queue_size must be positive")
    return config
