"""Structured Logging - JSON formatter and setup for the presence service.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (lane, app_id, asset_key, error_code, ...) surfaced when present
    - JSON format by default, human-readable text on request

Design Decisions:
    - JSONFormatter on the stdlib logging module: no extra dependency
    - setup_logging called once on startup via the FastAPI lifespan
"""

import logging
import json
from datetime import datetime, timezone

_EXTRA_KEYS = (
    "lane", "index", "interval_seconds", "app_id", "asset_key",
    "error_code", "event", "cleared", "path",
)


class JSONFormatter(logging.Formatter):
    """Format logs as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_KEYS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Configure the root logger for the application."""
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
