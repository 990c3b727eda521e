"""
Transactional statement replay against a live connection.

Protocol: ``SET autocommit=0``, select the target schema, execute every
statement in stream order, ``COMMIT``, ``SET autocommit=1``. The first
failing statement aborts the run; no rollback is attempted and the
connection is left in the driver's error state for the caller to tear down.
"""

import logging
import time
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import mysql.connector
from opentelemetry import trace

from ..errors import DatabaseConnectionError, ExecutionError
from ..utils.metrics import ReplayMetrics
from ..utils.sql_safety import quote_identifier
from ..utils.tracing import add_span_event, trace_operation

logger = logging.getLogger(__name__)


@dataclass
class ReplayResult:
    """Outcome of a replay run."""

    statements: int = 0
    inserts_merged: int = 0
    duration: float = 0.0
    dry_run: bool = False


class ReplayExecutor:
    """
    Applies statements to one connection inside one transaction.

    In dry-run mode the connection is never touched (it may be None) and
    every statement reports success. Debug mode logs the text of each
    statement whether or not it is executed.
    """

    def __init__(
        self,
        connection: Any,
        database: str,
        dry_run: bool = False,
        debug: bool = False,
        metrics: ReplayMetrics | None = None,
    ):
        if connection is None and not dry_run:
            raise ValueError("A connection is required unless dry_run is set")
        self.connection = connection
        self.database = database
        self.dry_run = dry_run
        self.debug = debug
        self.metrics = metrics
        self._cursor: Any = None

    def execute(self, statement: str) -> None:
        """
        Execute one statement.

        Raises:
            ExecutionError: If the server rejects the statement
        """
        if self.debug:
            logger.info(f"[query]\n{statement}")

        if self.dry_run:
            add_span_event("statement_skipped", reason="dry_run")
            return

        try:
            self._cursor.execute(statement)
            if self._cursor.with_rows:
                self._cursor.fetchall()
        except mysql.connector.Error as e:
            raise ExecutionError(statement, e) from e

    def _begin(self) -> None:
        if not self.dry_run:
            self._cursor = self.connection.cursor()
        self.execute("SET autocommit=0")
        try:
            self.execute(f"USE {quote_identifier(self.database)}")
        except ExecutionError as e:
            raise DatabaseConnectionError(
                f"Cannot select database {self.database!r}: {e.cause}"
            ) from e

    def _commit(self) -> None:
        self.execute("COMMIT")
        self.execute("SET autocommit=1")

    def run(self, statements: Iterable[str]) -> ReplayResult:
        """
        Replay statements as one transaction.

        Args:
            statements: Statements in stream order (plain or pre-batched)

        Returns:
            ReplayResult with the number of statements applied

        Raises:
            DatabaseConnectionError: If the target schema cannot be selected
            ExecutionError: If any statement fails
        """
        result = ReplayResult(dry_run=self.dry_run)
        start = time.monotonic()

        with trace_operation(
            "replay_statements",
            kind=trace.SpanKind.CLIENT,
            database=self.database,
            dry_run=self.dry_run,
        ) as span:
            try:
                self._begin()
                for statement in statements:
                    self.execute(statement)
                    result.statements += 1
                    if self.metrics:
                        self.metrics.record_statement(dry_run=self.dry_run)
                self._commit()
            finally:
                if self._cursor is not None:
                    self._cursor.close()
                    self._cursor = None
            span.set_attribute("statements", result.statements)

        result.duration = time.monotonic() - start
        logger.info(
            f"Replayed {result.statements} statement(s) in {result.duration:.2f}s",
            extra={"database": self.database, "dry_run": self.dry_run},
        )
        return result
