"""
Unit tests for mysqldump/replay/executor.py

Connections are mocked at the cursor level; the tests check the exact
statement protocol sent to the server.
"""

import logging
from unittest.mock import MagicMock, call

import pytest
from mysql.connector import errors as mysql_errors
from prometheus_client import CollectorRegistry

from mysqldump.errors import DatabaseConnectionError, ExecutionError
from mysqldump.replay.executor import ReplayExecutor, ReplayResult
from mysqldump.utils.metrics import ReplayMetrics


def executed(cursor: MagicMock) -> list[str]:
    return [c.args[0] for c in cursor.execute.call_args_list]


class TestReplayExecutor:
    """Test ReplayExecutor"""

    def test_protocol_order(self, mock_connection, mock_cursor):
        """Test autocommit off, schema selection, statements, commit, autocommit on"""
        executor = ReplayExecutor(mock_connection, "shop")

        result = executor.run(["CREATE TABLE t (id int)", "INSERT INTO t VALUES (1)"])

        assert executed(mock_cursor) == [
            "SET autocommit=0",
            "USE `shop`",
            "CREATE TABLE t (id int)",
            "INSERT INTO t VALUES (1)",
            "COMMIT",
            "SET autocommit=1",
        ]
        assert result.statements == 2
        assert result.dry_run is False
        mock_cursor.close.assert_called_once()

    def test_empty_input_still_commits(self, mock_connection, mock_cursor):
        ReplayExecutor(mock_connection, "shop").run([])

        assert executed(mock_cursor) == [
            "SET autocommit=0",
            "USE `shop`",
            "COMMIT",
            "SET autocommit=1",
        ]

    def test_database_name_quoted(self, mock_connection, mock_cursor):
        ReplayExecutor(mock_connection, "my`db").run([])

        assert executed(mock_cursor)[1] == "USE `my``db`"

    def test_result_rows_are_drained(self, mock_connection, mock_cursor):
        """Test that statements returning rows have their results fetched"""
        mock_cursor.with_rows = True

        ReplayExecutor(mock_connection, "shop").run(["SELECT 1"])

        assert mock_cursor.fetchall.call_count == 5

    def test_statement_failure_aborts(self, mock_connection, mock_cursor):
        """Test that the first failing statement stops the run without COMMIT"""
        failure = mysql_errors.ProgrammingError(msg="You have an error in your SQL syntax")

        def execute(statement):
            if statement == "BROKEN":
                raise failure

        mock_cursor.execute.side_effect = execute

        with pytest.raises(ExecutionError) as exc_info:
            ReplayExecutor(mock_connection, "shop").run(["SELECT 1", "BROKEN", "SELECT 2"])

        assert exc_info.value.statement == "BROKEN"
        assert exc_info.value.cause is failure
        assert "SELECT 2" not in executed(mock_cursor)
        assert "COMMIT" not in executed(mock_cursor)
        assert not any("ROLLBACK" in s for s in executed(mock_cursor))
        mock_cursor.close.assert_called_once()

    def test_use_failure_is_connection_error(self, mock_connection, mock_cursor):
        """Test that an unknown schema surfaces as DatabaseConnectionError"""
        def execute(statement):
            if statement.startswith("USE"):
                raise mysql_errors.ProgrammingError(msg="Unknown database 'nope'")

        mock_cursor.execute.side_effect = execute

        with pytest.raises(DatabaseConnectionError, match="nope"):
            ReplayExecutor(mock_connection, "nope").run(["SELECT 1"])

        assert "SELECT 1" not in executed(mock_cursor)

    def test_dry_run_never_touches_connection(self):
        """Test that dry-run needs no connection and executes nothing"""
        executor = ReplayExecutor(None, "shop", dry_run=True)

        result = executor.run(["INSERT INTO t VALUES (1)", "INSERT INTO t VALUES (2)"])

        assert result == ReplayResult(
            statements=2, inserts_merged=0, duration=result.duration, dry_run=True
        )

    def test_dry_run_with_connection(self, mock_connection):
        ReplayExecutor(mock_connection, "shop", dry_run=True).run(["SELECT 1"])

        mock_connection.cursor.assert_not_called()

    def test_connection_required_without_dry_run(self):
        with pytest.raises(ValueError, match="connection is required"):
            ReplayExecutor(None, "shop")

    def test_debug_logs_every_statement(self, caplog):
        """Test that debug mode logs statement text even in dry-run"""
        executor = ReplayExecutor(None, "shop", dry_run=True, debug=True)

        with caplog.at_level(logging.INFO, logger="mysqldump.replay.executor"):
            executor.run(["INSERT INTO t VALUES (42)"])

        assert "[query]\nINSERT INTO t VALUES (42)" in caplog.text
        assert "[query]\nCOMMIT" in caplog.text

    def test_no_statement_logging_without_debug(self, caplog, mock_connection):
        with caplog.at_level(logging.INFO, logger="mysqldump.replay.executor"):
            ReplayExecutor(mock_connection, "shop").run(["INSERT INTO t VALUES (42)"])

        assert "[query]" not in caplog.text

    def test_metrics_recorded(self, mock_connection):
        registry = CollectorRegistry()
        metrics = ReplayMetrics(registry=registry)

        result = ReplayExecutor(mock_connection, "shop", metrics=metrics).run(
            ["SELECT 1", "SELECT 2"]
        )

        # Session statements around the stream are not counted
        assert registry.get_sample_value(
            "mysqldump_replay_statements_total", {"mode": "executed"}
        ) == result.statements == 2

    def test_dry_run_metrics(self):
        registry = CollectorRegistry()
        metrics = ReplayMetrics(registry=registry)

        ReplayExecutor(None, "shop", dry_run=True, metrics=metrics).run(["SELECT 1"])

        assert registry.get_sample_value(
            "mysqldump_replay_statements_total", {"mode": "dry_run"}
        ) == 1
        assert registry.get_sample_value(
            "mysqldump_replay_statements_total", {"mode": "executed"}
        ) is None

    def test_cursor_opened_once(self, mock_connection):
        ReplayExecutor(mock_connection, "shop").run(["SELECT 1", "SELECT 2"])

        assert mock_connection.cursor.call_args_list == [call()]
