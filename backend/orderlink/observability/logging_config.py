"""Logging setup.

One stdout handler on the root logger. Lines are JSON objects by default
(LOG_JSON=false switches to plain text for local development) and carry the
request ID and shop of the request being handled.
"""

import json
import logging
import sys
from datetime import datetime, timezone

from .log_context import NO_REQUEST_ID, current_request_id, current_shop

# Everything a bare LogRecord has; other attributes arrived through extra={...}
_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message", "asctime", "request_id", "shop",
}

_TEXT_FORMAT = "%(asctime)s %(levelname)-7s [%(request_id)s] %(shop)s %(name)s: %(message)s"

_QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "httpx", "httpcore")


class RequestIDFilter(logging.Filter):
    """Stamp records with the current request ID and shop."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = current_request_id()
        if not getattr(record, "shop", None):
            record.shop = current_shop() or "-"
        return True


class JSONFormatter(logging.Formatter):
    """Render a record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "request_id": getattr(record, "request_id", NO_REQUEST_ID),
            "shop": getattr(record, "shop", None),
            "module": record.module,
            "function": record.funcName,
            "message": record.getMessage(),
        }
        if entry["shop"] == "-":
            entry["shop"] = None

        if record.exc_info:
            entry["error"] = str(record.exc_info[1])
            entry["traceback"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and key not in entry:
                entry[key] = value

        return json.dumps(entry, default=str)


def configure_logging(level: str = "INFO", json_format: bool = True) -> None:
    """Install the stdout handler on the root logger, replacing any others.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
        json_format: JSON lines if True, plain text otherwise
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.addFilter(RequestIDFilter())
    handler.setFormatter(JSONFormatter() if json_format else logging.Formatter(_TEXT_FORMAT))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(numeric_level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
