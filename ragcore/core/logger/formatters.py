"""
Formatters: JSON lines for files, plain text for the console.
"""
from __future__ import annotations

import json
import logging
import traceback
from datetime import datetime, timezone
from typing import Any, Optional

# Attributes every LogRecord carries; anything else arrived via ``extra=``.
_RESERVED = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """
    One JSON object per line. Structured fields passed through
    ``logger.info(..., extra={"document_id": ...})`` land under ``extra``.
    """

    def __init__(self, *, include_extra: bool = True) -> None:
        super().__init__()
        self.include_extra = include_extra

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "lineno": record.lineno,
        }
        if record.exc_info:
            payload["exception"] = "".join(traceback.format_exception(*record.exc_info)).strip()
        if self.include_extra:
            extra = {k: v for k, v in vars(record).items() if k not in _RESERVED}
            if extra:
                payload["extra"] = extra
        return json.dumps(payload, default=str, ensure_ascii=False)


class PlainConsoleFormatter(logging.Formatter):
    """Human-readable format for the console."""

    def __init__(self, fmt: Optional[str] = None, datefmt: Optional[str] = None) -> None:
        super().__init__(
            fmt=fmt or "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt=datefmt or "%Y-%m-%d %H:%M:%S",
        )
