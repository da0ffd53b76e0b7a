"""Run-scoped logging for awspurge.

Every record carries the run id. Records about a single resource also
carry its region, type, id and state (see Item.log_extra), which the text
format renders as a prefix and the JSON format as separate keys.
"""
import json
import logging
import uuid
import functools
import time
from datetime import datetime, timezone
from typing import Optional

_RUN_ID: Optional[str] = None

ITEM_FIELDS = ("region", "resource_type", "resource_id", "state")
QUIET_LOGGERS = ("botocore", "boto3", "urllib3", "s3transfer")


def get_run_id() -> str:
    """Short id shared by every record of this process."""
    global _RUN_ID
    if _RUN_ID is None:
        _RUN_ID = uuid.uuid4().hex[:8]
    return _RUN_ID


class RunContextFilter(logging.Filter):
    """Stamps the run id on records and fills missing item fields."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = get_run_id()
        for key in ITEM_FIELDS:
            if not hasattr(record, key):
                setattr(record, key, None)
        return True


class TextFormatter(logging.Formatter):
    def __init__(self):
        super().__init__("%(asctime)s [%(levelname)s] [%(run_id)s] %(message)s", datefmt="%Y-%m-%d %H:%M:%S")

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = super().formatMessage(record)
        context = [getattr(record, key, None) for key in ("region", "resource_type", "resource_id")]
        if any(context):
            line = f"{line} ({' - '.join(str(c) for c in context if c)})"
        return line


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "run_id": getattr(record, "run_id", None) or get_run_id(),
            "message": record.getMessage(),
        }
        for key in ITEM_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                entry[key] = value
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def setup_logging(verbosity: int = 0, json_format: bool = False) -> logging.Handler:
    """Route every record to stderr.

    Args:
        verbosity: 0=WARNING, 1=INFO, 2 or more=DEBUG
        json_format: one JSON object per line instead of text
    """
    level = {0: logging.WARNING, 1: logging.INFO}.get(verbosity, logging.DEBUG)

    handler = logging.StreamHandler()
    handler.addFilter(RunContextFilter())
    handler.setFormatter(JSONFormatter() if json_format else TextFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    # SDK wire logs only at -vvv
    sdk_level = logging.DEBUG if verbosity > 2 else max(level, logging.INFO)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(sdk_level)
    return handler


def timed(func):
    """Log how long the wrapped call took, even when it raises."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start = time.monotonic()
        try:
            return func(*args, **kwargs)
        finally:
            logging.info(f"{func.__name__} finished in {time.monotonic() - start:.2f}s")
    return wrapper
