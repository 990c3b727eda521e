"""
Logging setup for dump and replay runs.

Console logs always go to stderr: ``mysqldump-py dump`` writes the dump
document itself to stdout when no output file is given.
"""

import logging
import logging.handlers
import os
import sys
from collections.abc import Mapping

from .formatters import ConsoleFormatter, JSONFormatter

PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
PLAIN_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that flood DEBUG output
QUIET_LOGGERS = ("mysql.connector", "urllib3", "grpc")

_TRUTHY = ("true", "1", "yes", "on")


def _make_formatter(json_format: bool, app_name: str, console: bool) -> logging.Formatter:
    if json_format:
        return JSONFormatter(app_name=app_name)
    if console:
        return ConsoleFormatter(use_colors=True)
    return logging.Formatter(fmt=PLAIN_FORMAT, datefmt=PLAIN_DATEFMT)


def _file_handler(log_file: str, max_bytes: int, backup_count: int) -> logging.Handler:
    directory = os.path.dirname(log_file)
    if directory:
        os.makedirs(directory, exist_ok=True)
    return logging.handlers.RotatingFileHandler(
        filename=log_file,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    console_output: bool = True,
    json_format: bool = False,
    app_name: str = "mysqldump-py",
    max_bytes: int = 50 * 1024 * 1024,
    backup_count: int = 3,
) -> None:
    """
    Replace the root logger handlers for a dump or replay run.

    Args:
        level: Log level name; unknown names fall back to INFO
        log_file: Rotating log file path, created with its directory
        console_output: Log to stderr
        json_format: Emit JSON lines on every handler
        app_name: Value of the ``app`` field in JSON logs
        max_bytes: Log file size that triggers rotation
        backup_count: Rotated files to keep
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = []
    if console_output:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(_make_formatter(json_format, app_name, console=True))
        handlers.append(console)
    if log_file:
        file_handler = _file_handler(log_file, max_bytes, backup_count)
        file_handler.setFormatter(_make_formatter(json_format, app_name, console=False))
        handlers.append(file_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(numeric_level)
    for handler in handlers:
        handler.setLevel(numeric_level)
        root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(
        f"Logging ready: level={logging.getLevelName(numeric_level)}, "
        f"handlers={len(handlers)}, json={json_format}"
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def shutdown_logging() -> None:
    """Flush, close and detach every root handler."""
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
    logging.shutdown()


def _env_flag(environ: Mapping[str, str], name: str, default: bool) -> bool:
    value = environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


def configure_from_env(environ: Mapping[str, str] | None = None) -> None:
    """
    Configure logging from environment variables

    Environment variables:
        LOG_LEVEL: Log level (default: INFO)
        LOG_FILE: Log file path (default: none)
        LOG_JSON: JSON output (default: false)
        LOG_CONSOLE: stderr output (default: true)
    """
    env = os.environ if environ is None else environ
    setup_logging(
        level=env.get("LOG_LEVEL", "INFO"),
        log_file=env.get("LOG_FILE") or None,
        console_output=_env_flag(env, "LOG_CONSOLE", True),
        json_format=_env_flag(env, "LOG_JSON", False),
    )
