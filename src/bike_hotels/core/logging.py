"""Logging helpers."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_FILENAME = "bike_hotels.log"

# Transport libraries log every request at INFO.
NOISY_LOGGERS = ("httpx", "httpcore")


def configure_logging(
    level: str,
    log_dir: Path,
    *,
    quiet: Iterable[str] = NOISY_LOGGERS,
) -> Path:
    """Send records to stderr and ``log_dir/bike_hotels.log``; returns the log file path."""
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / LOG_FILENAME
    resolved = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=resolved,
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(log_path, encoding="utf-8"),
        ],
    )
    if resolved > logging.DEBUG:
        for name in quiet:
            logging.getLogger(name).setLevel(logging.WARNING)
    return log_path
