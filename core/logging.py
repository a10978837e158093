from __future__ import annotations

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any, Optional, TextIO

from pythonjsonlogger import jsonlogger

SERVICE_NAME = "wpbl-sync"
# httpx logs every request at INFO; one line per page already comes from sync.page
NOISY_LOGGERS = ("httpx", "httpcore")

current_run_id: ContextVar[str] = ContextVar("current_run_id", default="-")


class SyncRunFilter(logging.Filter):
    """Stamps the id of the sync run in progress on every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = current_run_id.get()
        return True


def configure_logging(level: str = "INFO", stream: Optional[TextIO] = None) -> logging.Handler:
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(
        jsonlogger.JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(run_id)s %(message)s",
            rename_fields={"asctime": "time", "levelname": "level"},
            static_fields={"service": SERVICE_NAME},
        )
    )
    handler.addFilter(SyncRunFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, root_logger.level))
    return handler


def set_run_id(value: str | None = None) -> str:
    run_id = value or uuid.uuid4().hex
    current_run_id.set(run_id)
    return run_id


def log_event(logger: logging.Logger, event: str, level: int = logging.INFO, **fields: Any) -> None:
    """Log ``event`` as the message with ``fields`` as top-level JSON keys."""
    logger.log(level, event, extra=fields)
