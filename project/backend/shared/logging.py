"""
Structured logging.

JSON log formatting with job-scoped context shared by all pipeline modules.
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Optional

_job_id: ContextVar[Optional[str]] = ContextVar("job_id", default=None)

# Attributes every LogRecord carries; anything else came in through `extra=`
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime"}


def set_job_id(job_id: Optional[object]) -> None:
    """
    Attach a job ID to every log record emitted in the current context.

    Args:
        job_id: Job ID, or None to clear it
    """
    _job_id.set(str(job_id) if job_id is not None else None)


def get_job_id() -> Optional[str]:
    """Return the job ID bound to the current context, if any."""
    return _job_id.get()


class JobContextFilter(logging.Filter):
    """Inject the context job ID into records that don't carry one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "job_id", None):
            record.job_id = _job_id.get()
        return True


class JSONFormatter(logging.Formatter):
    """Render log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key.startswith("_"):
                continue
            if value is None and key == "job_id":
                continue
            payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(level: str = "INFO") -> None:
    """
    Configure the root logger with a JSON stdout handler.

    Safe to call more than once; existing handlers are replaced.

    Args:
        level: Log level name
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(JobContextFilter())
    root.addHandler(handler)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a module logger.

    Args:
        name: Logger name (usually __name__ or the module name)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
