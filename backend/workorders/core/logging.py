"""Logging configuration with text and JSON output modes."""

from __future__ import annotations

import json
import logging
import sys
import time
from datetime import UTC, datetime
from typing import Any

from workorders.core.config import settings

_STANDARD_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys() | {"message", "asctime"},
)
_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def _record_extras(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _STANDARD_RECORD_ATTRS and not key.startswith("_")
    }


class KeyValueFormatter(logging.Formatter):
    """Plain-text formatter that appends `extra` fields as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        extras = _record_extras(record)
        if not extras:
            return base
        rendered = " ".join(f"{key}={value}" for key, value in sorted(extras.items()))
        return f"{base} {rendered}"


class JsonFormatter(logging.Formatter):
    """One JSON object per line, suitable for log shippers."""

    def __init__(self, *, use_utc: bool) -> None:
        super().__init__()
        self._use_utc = use_utc

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=UTC)
        if not self._use_utc:
            created = created.astimezone()
        payload: dict[str, Any] = {
            "ts": created.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(_record_extras(record))
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging() -> None:
    """Install the root handler once using the configured format and level."""
    root = logging.getLogger()
    if getattr(root, "_workorders_configured", False):
        return

    handler = logging.StreamHandler(sys.stdout)
    formatter: logging.Formatter
    if settings.log_format.lower() == "json":
        formatter = JsonFormatter(use_utc=settings.log_use_utc)
    else:
        formatter = KeyValueFormatter(_TEXT_FORMAT)
        if settings.log_use_utc:
            formatter.converter = time.gmtime
    handler.setFormatter(formatter)

    root.handlers = [handler]
    root.setLevel(settings.log_level.upper())
    root._workorders_configured = True  # type: ignore[attr-defined]


def get_logger(name: str) -> logging.Logger:
    """Return a module logger; configuration happens once at app startup."""
    return logging.getLogger(name)
