"""
Structured JSON logging.

Import as: from hr_portal.core.logger import get_logger
"""

import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from typing import Any

ROOT_LOGGER_NAME = "hr_portal"

# Attributes every LogRecord carries; anything else came in through `extra=`.
_RECORD_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "taskName", "message",
}


class JSONFormatter(logging.Formatter):
    """Render a record as one JSON object per line."""

    SENSITIVE_KEYS = {"password", "token", "access_token", "refresh_token", "secret", "authorization"}

    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRS or key.lower() in self.SENSITIVE_KEYS:
                continue
            log_obj[key] = value

        if record.exc_info:
            log_obj["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "stacktrace": traceback.format_exception(*record.exc_info),
            }

        return json.dumps(log_obj, default=str)


def configure_logging(level: str = "INFO") -> logging.Logger:
    log = logging.getLogger(ROOT_LOGGER_NAME)
    log.setLevel(level.upper())

    # reimport / repeated app creation must not stack handlers
    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
        log.addHandler(handler)

    return log


def get_logger(name: str) -> logging.Logger:
    """Child logger under the package root, e.g. get_logger(__name__)."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
