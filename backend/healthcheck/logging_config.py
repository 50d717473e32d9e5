# backend/healthcheck/logging_config.py
from __future__ import annotations

import json
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Iterator

from .config import settings

_CONTEXT_KEYS = ("checklist_id", "equipment_id", "template_id")

log_context_ctx: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})


def get_log_context() -> dict[str, Any]:
    return dict(log_context_ctx.get())


@contextmanager
def bind_log_context(**fields: Any) -> Iterator[None]:
    """
    Attach identifiers (checklist_id, equipment_id, ...) to every log line
    emitted inside the block. Nested binds merge with the outer ones.
    """
    merged = {**log_context_ctx.get(), **{k: v for k, v in fields.items() if v is not None}}
    token = log_context_ctx.set(merged)
    try:
        yield
    finally:
        log_context_ctx.reset(token)


class JsonFormatter(logging.Formatter):
    """
    Minimal JSON formatter.
    Includes bound context ids, level, message, logger, timestamp, exception.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        payload.update(get_log_context())

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        # Explicit extras win over the bound context
        for k in _CONTEXT_KEYS + ("score", "final_status", "alert_id", "health_score"):
            if hasattr(record, k):
                payload[k] = getattr(record, k)

        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: str | None = None) -> None:
    level = (level or settings.log_level or "INFO").upper()

    root = logging.getLogger()
    root.setLevel(level)

    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(JsonFormatter())

    root.addHandler(handler)

    logging.getLogger("sqlalchemy.engine").setLevel((settings.sql_log_level or "WARNING").upper())
