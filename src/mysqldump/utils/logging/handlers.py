"""
Context-carrying logger used for per-database and per-table messages.
"""

import logging
from typing import Any


class ContextLogger:
    """
    Logger wrapper whose bound context is sent as ``extra`` on every call.

    Keyword arguments given to a single call are merged over the bound
    context for that call only.

    Usage:
        log = ContextLogger("mysqldump.export", database="shop")
        log.update_context(table="orders")
        log.info("Exported table", rows=1200)
    """

    def __init__(self, name: str, **context: Any):
        self.logger = logging.getLogger(name)
        self.context = dict(context)

    def log(self, level: int, msg: str, *args: Any, exc_info: Any = None, **fields: Any) -> None:
        if self.logger.isEnabledFor(level):
            self.logger.log(level, msg, *args, exc_info=exc_info, extra=self.context | fields)

    def debug(self, msg: str, *args: Any, **fields: Any) -> None:
        self.log(logging.DEBUG, msg, *args, **fields)

    def info(self, msg: str, *args: Any, **fields: Any) -> None:
        self.log(logging.INFO, msg, *args, **fields)

    def warning(self, msg: str, *args: Any, **fields: Any) -> None:
        self.log(logging.WARNING, msg, *args, **fields)

    def error(self, msg: str, *args: Any, exc_info: Any = None, **fields: Any) -> None:
        self.log(logging.ERROR, msg, *args, exc_info=exc_info, **fields)

    def update_context(self, **context: Any) -> None:
        self.context.update(context)

    def get_context(self) -> dict[str, Any]:
        """Return a copy of the bound context."""
        return dict(self.context)
