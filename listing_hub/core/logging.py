"""Structured JSON logging.

Each listing load runs under one correlation id, so the collector lines and
the aggregator summary for that load can be grouped. The id lives in a
ContextVar and is inherited by the collector tasks the load spawns.
"""
import logging
import json
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone

from listing_hub.config import settings

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")


def set_correlation_id(load_id: str | None = None) -> str:
    """Tag the current context with ``load_id`` (a fresh uuid when omitted). Returns the id."""
    cid = load_id or str(uuid.uuid4())
    correlation_id_var.set(cid)
    return cid


def ensure_correlation_id() -> str:
    """Keep the id already set for this context, or start a new one."""
    return correlation_id_var.get("") or set_correlation_id()


class JSONFormatter(logging.Formatter):
    """Format log records as JSON for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        cid = correlation_id_var.get("")
        if cid:
            log_entry["correlation_id"] = cid

        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key in ("agent_id", "source", "count", "duration"):
            if hasattr(record, key):
                log_entry[key] = getattr(record, key)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


def setup_logging() -> None:
    """Configure application-wide logging."""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    root_logger.addHandler(handler)

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a named logger."""
    return logging.getLogger(name)
