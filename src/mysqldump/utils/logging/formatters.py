"""
Log formatters: JSON lines for collectors, coloured text for terminals.

Both render the ``extra={...}`` fields of a record (database, table,
statement counts and the like) as context.
"""

import json
import logging
import socket
import sys
import traceback
from datetime import UTC, datetime
from typing import Any

# Attributes every LogRecord carries; anything else came in through ``extra``
_RECORD_ATTRIBUTES = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def extract_context(record: logging.LogRecord) -> dict[str, Any]:
    """Return the ``extra={...}`` fields attached to a record."""
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RECORD_ATTRIBUTES and not key.startswith("_")
    }


class JSONFormatter(logging.Formatter):
    """
    One JSON object per record.

    Fields: ``level``, ``logger``, ``message``, ``app``, optional
    ``timestamp`` and ``hostname``, ``source``, ``exception`` when present,
    and ``context`` for extra fields.
    """

    def __init__(
        self,
        include_timestamp: bool = True,
        include_hostname: bool = True,
        app_name: str = "mysqldump-py",
    ):
        super().__init__()
        self.include_timestamp = include_timestamp
        self.include_hostname = include_hostname
        self.app_name = app_name
        self.hostname = socket.gethostname() if include_hostname else None

    @staticmethod
    def _exception(record: logging.LogRecord) -> dict[str, Any]:
        exc_type, exc_value, exc_tb = record.exc_info
        return {
            "type": exc_type.__name__,
            "message": str(exc_value),
            "traceback": traceback.format_exception(exc_type, exc_value, exc_tb),
        }

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "app": self.app_name,
        }
        if self.include_timestamp:
            payload["timestamp"] = datetime.fromtimestamp(record.created, UTC).isoformat()
        if self.hostname:
            payload["hostname"] = self.hostname
        payload["source"] = {
            "file": record.pathname,
            "line": record.lineno,
            "function": record.funcName,
        }
        if record.exc_info:
            payload["exception"] = self._exception(record)

        context = extract_context(record)
        if context:
            payload["context"] = context

        return json.dumps(payload, default=str)


class ConsoleFormatter(logging.Formatter):
    """Plain text with the level coloured on a TTY and context as ``[k=v, ...]``."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True):
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        # Logs go to stderr, so that is the stream whose TTY-ness matters
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        original_levelname = record.levelname
        color = self.LEVEL_COLORS.get(record.levelno) if self.use_colors else None
        if color:
            record.levelname = f"{color}{original_levelname}{self.RESET}"
        try:
            line = super().format(record)
        finally:
            record.levelname = original_levelname

        context = extract_context(record)
        if context:
            line += " [" + ", ".join(f"{key}={value}" for key, value in context.items()) + "]"
        return line
