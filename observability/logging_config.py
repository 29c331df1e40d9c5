"""Structured logging configuration.

Audit events from the validation pipeline carry their details (code, pass,
reason) as structured fields rather than interpolated into the message, so a
JSON log line can be filtered per code or per pass.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, MutableMapping

_ROOT_LOGGER_NAME = "dxcoder"


class StructuredFormatter(logging.Formatter):
    """Formatter that outputs JSON-structured log records."""

    def format(self, record: logging.LogRecord) -> str:
        log_dict: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Include extra fields if present
        if hasattr(record, "extra_fields"):
            log_dict.update(record.extra_fields)

        if record.exc_info:
            log_dict["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_dict, default=str)


class StructuredLogger(logging.LoggerAdapter[logging.Logger]):
    """Logger adapter that merges default fields into each record's extras."""

    def process(self, msg: str, kwargs: MutableMapping[str, Any]) -> tuple[str, MutableMapping[str, Any]]:
        extra = dict(self.extra or {})
        extra.update(kwargs.get("extra", {}))
        kwargs["extra"] = {"extra_fields": extra}
        return msg, kwargs


_configured = False


def configure_logging(
    level: int | str | None = None,
    structured: bool = True,
) -> None:
    """Attach a single stderr handler to the ``dxcoder`` logger namespace.

    The level defaults to ``DXCODER_LOG_LEVEL`` (INFO when unset). Calling this
    more than once is a no-op.
    """
    global _configured
    if _configured:
        return

    if level is None:
        level = os.getenv("DXCODER_LOG_LEVEL", "INFO").upper()

    namespace_logger = logging.getLogger(_ROOT_LOGGER_NAME)
    namespace_logger.setLevel(level)

    handler = logging.StreamHandler(sys.stderr)
    if structured:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )

    namespace_logger.addHandler(handler)
    namespace_logger.propagate = False
    _configured = True


def get_logger(name: str, **extra: Any) -> StructuredLogger:
    """Get a structured logger under the ``dxcoder`` namespace.

    Args:
        name: Dotted logger name, e.g. ``"validation.exclusions"``.
        **extra: Default fields attached to every record from this logger.
    """
    configure_logging()
    if not name.startswith(_ROOT_LOGGER_NAME):
        name = f"{_ROOT_LOGGER_NAME}.{name}"
    base_logger = logging.getLogger(name)
    return StructuredLogger(base_logger, extra)
