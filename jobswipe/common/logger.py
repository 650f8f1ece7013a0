"""
Centralized logging configuration for JobSwipe.

Modules log through `logging.getLogger(__name__)`. The background pipeline uses
get_logger() so each line carries the application id, both as an
[app:xxxxxxxx] message prefix and as the `application_id` record attribute
that the JSON format emits.
"""

import json
import logging
import os
import sys
from typing import Any, Dict, Optional

# Attributes every LogRecord has; anything else came in through `extra`
_RECORD_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def is_debug_mode() -> bool:
    """Check if debug mode is enabled via environment."""
    return os.getenv("DEBUG_MODE", "false").lower() == "true"


class ApplicationLogger(logging.LoggerAdapter):
    """Logger adapter bound to one application pipeline run."""

    def __init__(self, logger: logging.Logger, application_id: Optional[str] = None):
        super().__init__(logger, {"application_id": application_id} if application_id else {})
        self.application_id = application_id

    def process(self, msg, kwargs):
        if self.application_id:
            msg = f"[app:{self.application_id[-8:]}] {msg}"
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


class JsonFormatter(logging.Formatter):
    """One JSON object per line, including fields passed via `extra`."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS and not key.startswith("_"):
                entry[key] = value
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(level: Optional[str] = None, format: str = "simple") -> None:
    """
    Configure the root logger with a single stdout handler.

    Args:
        level: Log level name; defaults to DEBUG under DEBUG_MODE, else LOG_LEVEL or INFO
        format: "simple" for humans, "json" for log aggregation
    """
    if level is None:
        level = "DEBUG" if is_debug_mode() else os.getenv("LOG_LEVEL", "INFO")
    log_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    if format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(log_level)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str, application_id: Optional[str] = None) -> ApplicationLogger:
    """Get a logger that tags every message with `application_id`."""
    return ApplicationLogger(logging.getLogger(name), application_id)
