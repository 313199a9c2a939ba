from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

MAX_BYTES = 5 * 1024 * 1024  # 5 MB
BACKUP_COUNT = 3


def setup_logging(level: str | int = logging.INFO, log_file: str | None = None, fmt: str = DEFAULT_FORMAT) -> None:
    """Configure the root logger once per entry point: stderr plus an optional rotating file."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(log_file, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT))

    logging.basicConfig(level=level, format=fmt, handlers=handlers, force=True)

    # engineio/socketio log every packet at INFO
    logging.getLogger("engineio.server").setLevel(logging.WARNING)
    logging.getLogger("socketio.server").setLevel(logging.WARNING)


def setup_logging_from(config: Any) -> None:
    """Apply ``LOG_LEVEL`` and ``LOG_FILE`` from a config object such as ``Config``."""
    setup_logging(getattr(config, "LOG_LEVEL", logging.INFO), getattr(config, "LOG_FILE", "") or None)
