"""
Structured logging configuration for dump and replay runs.

Usage:
    from mysqldump.utils.logging import setup_logging, get_logger

    # Setup logging (call once at application startup)
    setup_logging(level="INFO", log_file="/var/log/mysqldump/run.log")

    logger = get_logger(__name__)
    logger.info("Exported table", extra={"table": "customers", "rows": 12345})
"""

from .config import configure_from_env, get_logger, setup_logging, shutdown_logging
from .formatters import ConsoleFormatter, JSONFormatter
from .handlers import ContextLogger

__all__ = [
    "setup_logging",
    "get_logger",
    "configure_from_env",
    "shutdown_logging",
    "JSONFormatter",
    "ConsoleFormatter",
    "ContextLogger",
]
