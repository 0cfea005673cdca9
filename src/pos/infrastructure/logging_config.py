"""Logging setup for the ``pos`` logger hierarchy.

Modules log with ``logging.getLogger(__name__)``, a short event name as
the message and the structured fields in ``extra``.  ``configure_logging``
attaches one handler that renders those records either as plain text or
as one JSON object per line.
"""

from __future__ import annotations

import json
import logging
import sys
import threading
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any

_LOGGER_PREFIX = "pos"

_STDLIB_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "taskName"}


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in vars(record).items() if k not in _STDLIB_KEYS}


class _JSONEncoder(json.JSONEncoder):
    """Handle datetime, Decimal and Enum values in log payloads."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, Decimal):
            return str(obj)
        if isinstance(obj, Enum):
            return obj.value
        return super().default(obj)


class StructuredFormatter(logging.Formatter):
    """Formats each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        for key, val in _extra_fields(record).items():
            payload.setdefault(key, val)

        if record.exc_info and record.exc_info[1] is not None:
            exc = record.exc_info[1]
            payload["exc_type"] = type(exc).__name__
            payload["exc_message"] = str(exc)
            if hasattr(exc, "code"):
                payload["exc_code"] = exc.code
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, cls=_JSONEncoder, default=str)


class KeyValueFormatter(logging.Formatter):
    """``LEVEL logger event key=value ...`` for humans at a terminal."""

    def format(self, record: logging.LogRecord) -> str:
        line = f"{record.levelname:<7} {record.name} {record.getMessage()}"
        fields = " ".join(f"{k}={v}" for k, v in sorted(_extra_fields(record).items()))
        if fields:
            line = f"{line} {fields}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


_lock = threading.Lock()
_handler: logging.Handler | None = None


def configure_logging(
    level: int | str = logging.WARNING,
    json_output: bool = False,
    stream: Any = None,
) -> None:
    """Configure the ``pos`` logger hierarchy.

    Calling it again replaces the previous handler instead of stacking a
    second one.
    """
    global _handler
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        level = resolved

    root_logger = logging.getLogger(_LOGGER_PREFIX)
    with _lock:
        if _handler is not None:
            root_logger.removeHandler(_handler)
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(StructuredFormatter() if json_output else KeyValueFormatter())
        root_logger.addHandler(handler)
        root_logger.setLevel(level)
        root_logger.propagate = False
        _handler = handler


def reset_logging() -> None:
    """Remove the handler installed by ``configure_logging``."""
    global _handler
    root_logger = logging.getLogger(_LOGGER_PREFIX)
    with _lock:
        if _handler is not None:
            root_logger.removeHandler(_handler)
            _handler = None
        root_logger.setLevel(logging.NOTSET)
        root_logger.propagate = True
