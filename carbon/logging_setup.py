"""Logging wiring: request log line + WARN+ ring buffer.

The ring buffer keeps recent warnings/errors with their request_id so a
failing AI call or factor lookup can be traced without log aggregation.
"""

from __future__ import annotations

import collections
import logging
import time

from flask import g, has_request_context, request

LOG_BUFFER: collections.deque[dict] = collections.deque(maxlen=500)
REQUEST_LOGGER = "carbon"


class SupportLogHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        if has_request_context():
            rid = getattr(g, "request_id", "-")
            path = request.path
        else:
            rid = "-"
            path = "-"
        LOG_BUFFER.append(
            {
                "ts": time.time(),
                "level": record.levelname,
                "logger": record.name,
                "msg": self.format(record),
                "request_id": rid,
                "path": path,
            }
        )


def install_support_log_handler() -> None:
    root = logging.getLogger()
    if any(isinstance(h, SupportLogHandler) for h in root.handlers):
        return
    h = SupportLogHandler(level=logging.WARNING)
    h.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(h)


def get_request_logger() -> logging.Logger:
    log = logging.getLogger(REQUEST_LOGGER)
    if not log.handlers:
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter("%(message)s"))
        log.addHandler(h)
    log.setLevel(logging.INFO)
    return log


def recent_problems(limit: int = 50) -> list[dict]:
    return list(LOG_BUFFER)[-limit:]


__all__ = ["LOG_BUFFER", "install_support_log_handler", "get_request_logger", "recent_problems"]
