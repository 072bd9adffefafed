"""JSON logging for the market admin console.

Each record is one JSON object on stderr. A run binds context fields (session
id, command) once through :func:`setup_logger`; individual calls may attach
structured fields with ``extra={"event_fields": {...}}``. Messages and fields
are redacted before they are serialized.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from .redaction import sanitize_for_logging, sanitize_text

EVENT_FIELDS_ATTR = "event_fields"


class JsonConsoleFormatter(logging.Formatter):
    """Serialize a record plus bound context and per-call event fields."""

    def __init__(self, context: Mapping[str, Any] | None = None) -> None:
        super().__init__()
        self.context: dict[str, Any] = dict(context or {})

    def bind(self, **fields: Any) -> None:
        self.context.update(fields)

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": sanitize_text(record.getMessage()),
        }
        if self.context:
            event["context"] = sanitize_for_logging(self.context)
        fields = getattr(record, EVENT_FIELDS_ATTR, None)
        if isinstance(fields, Mapping) and fields:
            event["fields"] = sanitize_for_logging(dict(fields))
        if record.exc_info:
            event["exception"] = sanitize_text(self.formatException(record.exc_info))
        return json.dumps(event, default=str)


def setup_logger(
    name: str = "market_admin",
    level: int | str = logging.INFO,
    *,
    context: Mapping[str, Any] | None = None,
) -> logging.Logger:
    """Return the console logger, installing the JSON handler on first use.

    Calling again re-applies ``level`` and merges ``context`` into the existing
    handler's formatter, so the CLI can bind the session once settings load.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    for handler in logger.handlers:
        if isinstance(handler.formatter, JsonConsoleFormatter):
            handler.formatter.bind(**(context or {}))
            return logger

    # stderr keeps stdout free for tables
    handler = logging.StreamHandler()
    handler.setFormatter(JsonConsoleFormatter(context))
    logger.addHandler(handler)
    return logger
