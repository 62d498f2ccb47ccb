"""In-memory diagnostics log.

A bounded ring buffer of recent log records, tagged with the request id that
produced them, backing the view page's debug panel and /health/diagnostics.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections import deque
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from config import settings

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

DIAGNOSTIC_LOGGERS = ("services", "routers")


def new_request_id(supplied: Optional[str] = None) -> str:
    text = (supplied or "").strip()
    return text[:64] if text else uuid.uuid4().hex


class DiagnosticsBuffer(logging.Handler):
    """Logging handler that keeps the last ``capacity`` records."""

    def __init__(self, capacity: int = 500, level: int = logging.DEBUG):
        super().__init__(level=level)
        self._entries: deque[Dict[str, Any]] = deque(maxlen=max(int(capacity), 1))
        self._entries_lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._entries.maxlen or 0

    def emit(self, record: logging.LogRecord) -> None:
        try:
            entry = {
                "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
                "level": record.levelname,
                "logger": record.name,
                "message": record.getMessage(),
                "request_id": request_id_var.get(),
            }
        except Exception:
            self.handleError(record)
            return
        with self._entries_lock:
            self._entries.append(entry)

    def entries(self, *, request_id: Optional[str] = None, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        with self._entries_lock:
            items = list(self._entries)
        if request_id:
            items = [item for item in items if item["request_id"] == request_id]
        if limit is not None:
            items = items[-max(int(limit), 0):] if limit > 0 else []
        return items

    def clear(self) -> None:
        with self._entries_lock:
            self._entries.clear()


diagnostics_buffer = DiagnosticsBuffer(capacity=settings.DIAGNOSTICS_BUFFER_SIZE)


def install_diagnostics(level: str = "INFO") -> DiagnosticsBuffer:
    """Attach the shared buffer to the application loggers (idempotent)."""
    numeric_level = logging.getLevelName(str(level).upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    for name in DIAGNOSTIC_LOGGERS:
        target = logging.getLogger(name)
        if diagnostics_buffer not in target.handlers:
            target.addHandler(diagnostics_buffer)
        if target.level == logging.NOTSET or target.level > numeric_level:
            target.setLevel(numeric_level)
    return diagnostics_buffer
