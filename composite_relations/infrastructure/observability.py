"""Structured Logging: JSON formatter and setup for relation-loading observability.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (relation, table, parents, results, buckets, error_code) surfaced when present
    - JSON format by default, human-readable with fmt="text"

Design Decisions:
    - JSONFormatter over third-party libs: stdlib logging only
    - Library modules only create loggers; the host calls configure_logging (settings)
      or setup_logging (explicit level and format)
"""

import logging
import json
from datetime import datetime, timezone

from composite_relations.config import Settings, get_settings

_EXTRA_FIELDS = (
    "relation", "table", "parents", "results", "buckets", "error_code", "operation",
)


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Attach one stream handler to the root logger and return it."""
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler


def configure_logging(settings: Settings | None = None) -> logging.Handler:
    """Install logging from COMPOSITE_LOG_LEVEL / COMPOSITE_LOG_FORMAT.

    Relation modules log under the "composite_relations" logger; that logger's
    level follows the settings too, so a host that already configured the root
    logger still sees relation-loading records at the requested level.
    """
    settings = settings or get_settings()
    handler = setup_logging(settings.log_level, settings.log_format)
    logging.getLogger("composite_relations").setLevel(
        getattr(logging, settings.log_level.upper(), logging.INFO),
    )
    return handler
