"""
Process-wide logging setup.

Plain text locally, one JSON object per line in prod. Both can be forced with
``LOG_FORMAT`` and ``LOG_LEVEL``. Code logs through ``logging.getLogger(__name__)``
and passes document or request context as ``extra``:

    logger.info("Deleted %s", doc.id, extra={"document_id": doc.id})
"""

from __future__ import annotations

import json
import logging
import os
from logging.config import dictConfig
from traceback import format_exception
from typing import Any

from pdf_vault.app.core.env import pick

# Partial-failure states (orphaned blob, dangling tombstone) are logged here so
# operators can route them separately from ordinary request errors.
RECONCILE_LOGGER = "pdf_vault.reconcile"

DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"
PLAIN_FORMAT = "%(asctime)s %(levelname)-5s [pid:%(process)d] %(name)s: %(message)s"

# LogRecord attribute -> key under "context" in JSON output
CONTEXT_FIELDS: dict[str, str] = {
    "document_id": "document_id",
    "blob_id": "blob_id",
    "http_method": "method",
    "path": "path",
    "status_code": "status",
}

# third-party loggers and the level they are held at
QUIET_LOGGERS: dict[str, str] = {
    "uvicorn": "INFO",
    "uvicorn.error": "INFO",
    "uvicorn.access": "INFO",
    "pymongo": "WARNING",
}


def _stack_limit() -> int:
    return int(os.getenv("LOG_STACK_LIMIT", "4000"))


class JsonFormatter(logging.Formatter):
    """One JSON object per record: time, level, logger, message, plus context and error when present."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: dict[str, Any] = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "pid": record.process,
            "message": record.getMessage(),
        }
        context = self._context(record)
        if context:
            payload["context"] = context
        if record.exc_info:
            payload["error"] = self._error(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)

    @staticmethod
    def _context(record: logging.LogRecord) -> dict[str, Any]:
        found = {}
        for attr, key in CONTEXT_FIELDS.items():
            value = getattr(record, attr, None)
            if value is not None:
                found[key] = value
        return found

    @staticmethod
    def _error(exc_info) -> dict[str, Any]:
        exc_type, exc, _ = exc_info
        error: dict[str, Any] = {}
        if exc_type is not None:
            error["type"] = exc_type.__name__
        if exc is not None and str(exc):
            error["message"] = str(exc)
        stack = "".join(format_exception(*exc_info))
        limit = _stack_limit()
        if len(stack) > limit:
            stack = stack[:limit] + "...(truncated)"
        error["stack"] = stack
        return error


def build_logging_config(level: str, formatter: str) -> dict[str, Any]:
    loggers: dict[str, Any] = {
        name: {"level": lvl, "handlers": [], "propagate": True} for name, lvl in QUIET_LOGGERS.items()
    }
    loggers[RECONCILE_LOGGER] = {"level": "INFO", "handlers": [], "propagate": True}
    return {
        "version": 1,
        "disable_existing_loggers": False,  # keep uvicorn & pymongo loggers alive
        "formatters": {
            "plain": {"format": PLAIN_FORMAT, "datefmt": DATE_FORMAT},
            "json": {"()": JsonFormatter, "datefmt": DATE_FORMAT},
        },
        "handlers": {
            "stream": {"class": "logging.StreamHandler", "level": level, "formatter": formatter},
        },
        "root": {"level": level, "handlers": ["stream"]},
        "loggers": loggers,
    }


def setup_logging(level: str | None = None, fmt: str | None = None) -> None:
    """Configure the root logger. Explicit arguments win over ``LOG_LEVEL`` / ``LOG_FORMAT``."""
    level = (level or os.getenv("LOG_LEVEL") or pick(prod="INFO", nonprod="DEBUG")).upper()
    fmt = (fmt or os.getenv("LOG_FORMAT") or pick(prod="json", nonprod="plain")).lower()
    dictConfig(build_logging_config(level, "json" if fmt == "json" else "plain"))


__all__ = ["RECONCILE_LOGGER", "JsonFormatter", "build_logging_config", "setup_logging"]
