"""Runtime configuration defaults for persistence, live queries and logging."""

from __future__ import annotations

import logging
import os
from pathlib import Path

DB_PATH = os.environ.get("KITCHEN_DB_PATH", "data/kitchen.db")
DEBUG_LOG_PATH = os.environ.get("KITCHEN_DEBUG_LOG", "/tmp/kitchen-debug.log")
BUSINESS_NAME = os.environ.get("KITCHEN_BUSINESS_NAME", "The Cloud Kitchen")

# Live queries deliver their initial backlog in cumulative pages of this size.
SNAPSHOT_PAGE_SIZE = int(os.environ.get("KITCHEN_SNAPSHOT_PAGE_SIZE", "100"))

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(path: str | None = None, level: int = logging.DEBUG) -> None:
    """Route package logs to the debug log file; the terminal belongs to the TUI."""
    log_file = Path(path or DEBUG_LOG_PATH)
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_file, encoding="utf-8")
    except OSError:
        # Logging must never interfere with app flow.
        handler = logging.NullHandler()
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))

    root = logging.getLogger("kitchen")
    root.handlers = [handler]
    root.setLevel(level)
    root.propagate = False
