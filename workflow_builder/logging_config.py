"""
Logging configuration.

- Development: human-readable format on stderr
- Production: one JSON object per line
- Level: Settings.log_level (WORKFLOW_BUILDER_LOG_LEVEL)
"""

import json
import logging
import sys
from datetime import datetime, timezone

from .config import Settings


class JSONFormatter(logging.Formatter):
    """JSON log formatter for production / log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
        }
        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        for key in ("workflow_id", "status", "method", "path", "request_id"):
            val = getattr(record, key, None)
            if val is not None:
                log_entry[key] = val
        return json.dumps(log_entry, ensure_ascii=False)


READABLE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(settings: Settings) -> None:
    """Install a single stderr handler on the package logger."""
    handler = logging.StreamHandler(sys.stderr)
    if settings.app_env == "prod":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(READABLE_FORMAT, datefmt="%H:%M:%S"))

    logger = logging.getLogger("workflow_builder")
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(settings.log_level.upper())
    logger.propagate = False
