"""
Logging for the image redirect service: one JSON object per line on stdout, or
plain text with IMAGE_REDIRECT_LOG_FORMAT=text.
"""

import json
import logging
import os
import sys
from datetime import UTC, datetime
from typing import Any, Dict

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

_level_name = os.environ.get("IMAGE_REDIRECT_LOG_LEVEL", "").upper()
LOG_LEVEL = getattr(logging, _level_name) if _level_name in _LEVELS else logging.INFO
LOG_FORMAT = os.environ.get("IMAGE_REDIRECT_LOG_FORMAT", "json").lower()

TEXT_FORMAT = "%(levelname)s [%(name)s] %(message)s"

# record attribute -> JSON key; set by _AccessLogMiddleware via `extra=`
_REQUEST_FIELDS = {
    "client": "client",
    "method": "method",
    "path": "path",
    "status": "status",
}


class JSONLogFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for attr, key in _REQUEST_FIELDS.items():
            value = getattr(record, attr, None)
            if value is not None:
                entry[key] = value
        duration = getattr(record, "duration", None)
        if duration is not None:
            entry["duration_ms"] = round(duration * 1000, 2)
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def setup_logging(fmt: str | None = None) -> None:
    """Point the root logger (and uvicorn's) at a single stdout handler."""
    handler = logging.StreamHandler(sys.stdout)
    if (fmt or LOG_FORMAT).lower() == "text":
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    else:
        handler.setFormatter(JSONLogFormatter())

    root = logging.getLogger()
    root.setLevel(LOG_LEVEL)
    for old in list(root.handlers):
        root.removeHandler(old)
    root.addHandler(handler)

    for name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        uv_logger = logging.getLogger(name)
        for old in list(uv_logger.handlers):
            uv_logger.removeHandler(old)
        uv_logger.propagate = True

    logging.getLogger("image_redirect").setLevel(LOG_LEVEL)
    # httpx logs every request at INFO; the upstream client already does.
    logging.getLogger("httpx").setLevel(logging.WARNING)
