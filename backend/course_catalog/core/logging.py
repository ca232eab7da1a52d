from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

# Extra attributes promoted to top-level JSON keys when a log call passes them.
_EXTRA_KEYS = ("course_id", "user_id", "error_code", "path")


class JSONFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, logger, message (+ known extras)."""

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
        return json.dumps(log, ensure_ascii=False, default=str)


_HANDLER_MARK = "_course_catalog_handler"


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Install a single root handler. Safe to call more than once (e.g. per test app)."""
    root = logging.getLogger()
    for existing in list(root.handlers):
        if getattr(existing, _HANDLER_MARK, False):
            root.removeHandler(existing)

    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    setattr(handler, _HANDLER_MARK, True)

    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
