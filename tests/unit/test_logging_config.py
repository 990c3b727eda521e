"""
Unit tests for mysqldump/utils/logging

Covers JSON and console formatting, context logging and environment-based
configuration.
"""

import json
import logging
import os
import sys
import tempfile
from unittest.mock import patch

import pytest

from mysqldump.utils.logging import (
    ConsoleFormatter,
    ContextLogger,
    JSONFormatter,
    configure_from_env,
    setup_logging,
)


def make_record(msg="Exported table", level=logging.INFO, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="mysqldump.export.writer",
        level=level,
        pathname="/src/mysqldump/export/writer.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root_logger():
    """Put the root logger handlers back after setup_logging"""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            handler.close()
            root.removeHandler(handler)
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


class TestJSONFormatter:
    """Test JSONFormatter class"""

    def test_init_with_defaults(self):
        """Test initialization with default parameters"""
        # Arrange & Act
        formatter = JSONFormatter()

        # Assert
        assert formatter.include_timestamp is True
        assert formatter.include_hostname is True
        assert formatter.app_name == "mysqldump-py"
        assert formatter.hostname is not None

    def test_format_basic_log_record(self):
        """Test formatting a basic log record"""
        # Arrange
        formatter = JSONFormatter(include_hostname=False)

        # Act
        data = json.loads(formatter.format(make_record()))

        # Assert
        assert data["level"] == "INFO"
        assert data["logger"] == "mysqldump.export.writer"
        assert data["message"] == "Exported table"
        assert data["app"] == "mysqldump-py"
        assert "timestamp" in data
        assert "hostname" not in data
        assert data["source"]["line"] == 42

    def test_format_with_context(self):
        """Test that extra fields land under context"""
        formatter = JSONFormatter()

        data = json.loads(formatter.format(make_record(database="shop", table="orders")))

        assert data["context"] == {"database": "shop", "table": "orders"}

    def test_format_with_exception(self):
        formatter = JSONFormatter()
        try:
            raise ValueError("bad value")
        except ValueError:
            record = make_record(level=logging.ERROR)
            record.exc_info = sys.exc_info()

        data = json.loads(formatter.format(record))

        assert data["exception"]["type"] == "ValueError"
        assert data["exception"]["message"] == "bad value"

    def test_format_without_timestamp(self):
        data = json.loads(JSONFormatter(include_timestamp=False).format(make_record()))

        assert "timestamp" not in data


class TestConsoleFormatter:
    """Test ConsoleFormatter class"""

    def test_format_appends_context(self):
        formatter = ConsoleFormatter(use_colors=False)

        output = formatter.format(make_record(table="orders"))

        assert "[INFO] mysqldump.export.writer: Exported table" in output
        assert output.endswith("[table=orders]")

    def test_colors_disabled_without_tty(self):
        with patch.object(sys.stderr, "isatty", return_value=False):
            formatter = ConsoleFormatter(use_colors=True)

        assert formatter.use_colors is False

    def test_levelname_restored(self):
        """Test that coloring does not leak into the record"""
        formatter = ConsoleFormatter()
        formatter.use_colors = True
        record = make_record()

        output = formatter.format(record)

        assert "\033[32m" in output
        assert record.levelname == "INFO"


class TestContextLogger:
    """Test ContextLogger class"""

    def test_context_attached(self, caplog):
        log = ContextLogger("mysqldump.test", database="shop")

        with caplog.at_level(logging.INFO, logger="mysqldump.test"):
            log.info("Exported", table="orders")

        record = caplog.records[0]
        assert record.database == "shop"
        assert record.table == "orders"

    def test_update_context(self):
        log = ContextLogger("mysqldump.test", database="shop")

        log.update_context(table="orders")
        context = log.get_context()
        context["table"] = "changed"

        assert log.get_context() == {"database": "shop", "table": "orders"}


class TestSetupLogging:
    """Test setup_logging and configure_from_env"""

    def test_console_handler_on_stderr(self, restore_root_logger):
        setup_logging(level="DEBUG")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        stream_handlers = [h for h in root.handlers if isinstance(h, logging.StreamHandler)]
        assert any(h.stream is sys.stderr for h in stream_handlers)
        assert logging.getLogger("mysql.connector").level == logging.WARNING

    def test_json_file_logging(self, restore_root_logger):
        with tempfile.TemporaryDirectory() as tmp:
            log_file = os.path.join(tmp, "logs", "run.log")

            setup_logging(log_file=log_file, console_output=False, json_format=True)
            logging.getLogger("mysqldump.test").info("hello", extra={"table": "t"})
            for handler in logging.getLogger().handlers:
                handler.flush()

            with open(log_file) as f:
                data = json.loads(f.readline())

        assert data["message"] == "hello"
        assert data["context"]["table"] == "t"

    def test_configure_from_env(self, restore_root_logger, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        monkeypatch.setenv("LOG_JSON", "true")
        monkeypatch.delenv("LOG_FILE", raising=False)
        monkeypatch.delenv("LOG_CONSOLE", raising=False)

        configure_from_env()

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, JSONFormatter)
