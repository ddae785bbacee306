# yt_digest/logging_core/logger.py
"""
Centralized structured logging for yt_digest.

Emits JSON lines to stderr with the fields:
- timestamp (ISO, UTC)
- level
- message
- run_id (bound per retrieval call)
- channel (optional, filled by caller)
- event_type (start/attempt/progress/success/failure)
- metadata (dict)

All logging in the package goes through get_logger() and log_event().
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, MutableMapping, Optional, Tuple
from uuid import UUID

ROOT_LOGGER_NAME = "yt_digest"


class JSONFormatter(logging.Formatter):
    """Formatter that outputs one JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_record: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "message": record.getMessage(),
        }

        for field in ("run_id", "channel", "event_type", "metadata"):
            value = getattr(record, field, None)
            if value is not None:
                log_record[field] = value

        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(log_record, ensure_ascii=False, default=str)


class RunLoggerAdapter(logging.LoggerAdapter):
    """Binds a run_id to every record without mutating the shared logger."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        if self.extra and self.extra.get("run_id"):
            extra.setdefault("run_id", self.extra["run_id"])
        kwargs["extra"] = extra
        return msg, kwargs


def _configure_root() -> logging.Logger:
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    return logger


def get_logger(run_id: Optional[UUID] = None) -> logging.LoggerAdapter:
    """
    Return a logger bound to the given retrieval run.

    The JSON handler is installed once on the package root logger.
    """
    base = _configure_root()
    return RunLoggerAdapter(base, {"run_id": str(run_id) if run_id else None})


def log_event(
    logger: logging.LoggerAdapter | logging.Logger,
    level: int,
    message: str,
    *,
    channel: str | None = None,
    event_type: str,
    metadata: Dict[str, Any] | None = None,
    exc_info: bool = False,
) -> None:
    """Structured logging helper used everywhere in the package."""
    extra: Dict[str, Any] = {"event_type": event_type}
    if channel:
        extra["channel"] = channel
    if metadata:
        extra["metadata"] = metadata

    logger.log(level, message, extra=extra, exc_info=exc_info)


# High-Level Intent
# One JSON line per event, tagged with the retrieval run that produced it.
# Channel adapters log every attempt at WARNING when it degrades, so a
# single run's log shows exactly which channel/language/format was tried.

# Data Flow
# retrieve() creates run_id → get_logger(run_id) → passed implicitly to
# channels via run_id → log_event(..., channel=..., event_type=...)
