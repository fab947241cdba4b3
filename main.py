"""System logger service: serves the log API and optionally emits demo events."""

import argparse
import logging
import random
import signal
import sys
import threading

from system_logger.api import create_app
from system_logger.config import load_config
from system_logger.store import get_system_logger, reset_system_logger

logger = logging.getLogger(__name__)

CATEGORIES = ["auth", "sync", "billing", "scheduler", "storage"]
DEMO_EVENTS = {
    "info": ["Request processed", "Cache refreshed", "Session resumed"],
    "success": ["Sync completed", "Payment captured", "Backup finished"],
    "warning": ["Slow upstream response", "Retrying request", "Queue nearing capacity"],
    "error": ["Token validation failed", "Upstream timeout", "Write rejected"],
    "debug": ["Entering handler", "Parsed request body"],
}

_stop = threading.Event()


def _signal_handler(sig, _frame):
    logger.info("Shutdown signal received (signal %d), stopping...", sig)
    _stop.set()
    reset_system_logger()
    sys.exit(0)


def _demo_loop(store, interval: float):
    while not _stop.wait(interval):
        level = random.choice(list(DEMO_EVENTS))
        store.log(
            level,
            random.choice(CATEGORIES),
            random.choice(DEMO_EVENTS[level]),
            {"latency_ms": random.randint(1, 900)},
        )


def main():
    parser = argparse.ArgumentParser(description="Run the system logger API")
    parser.add_argument("--config", help="Path to a YAML config file")
    parser.add_argument("--demo", action="store_true", help="Emit random demo events")
    parser.add_argument("--demo-interval", type=float, default=0.5,
                        help="Seconds between demo events")
    args = parser.parse_args()

    config = load_config(args.config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [system-logger] %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    logger.info(
        "Config: archive_dir=%s, max_entries=%d, queue_size=%d",
        config.archive_dir, config.max_entries, config.queue_size,
    )
    store = get_system_logger(config)
    store.info("system", "System logger started")

    if args.demo:
        threading.Thread(target=_demo_loop, args=(store, args.demo_interval), daemon=True).start()

    app = create_app(config, store)
    try:
        app.run(host=config.host, port=config.port)
    finally:
        _stop.set()
        reset_system_logger()


if __name__ == "__main__":
    main()
