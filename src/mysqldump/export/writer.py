"""
Dump document writer.

Produces the textual dump of one or more databases: a header, per-table
structure and records blocks, trigger blocks, view definitions and a footer.
The output is the exact input the replay path expects.
"""

import logging
import sys
import time
from contextlib import closing
from datetime import datetime, timedelta
from typing import Any, TextIO

from opentelemetry import trace

from .. import __version__
from ..codec import RowEncoder
from ..config import ConnectionTarget, DumpConfig
from ..connection import ManagedConnection, open_connection
from ..errors import DumpError, StreamIOError
from ..utils.logging import ContextLogger
from ..utils.metrics import DumpMetrics
from ..utils.sql_safety import quote_identifier
from ..utils.tracing import trace_operation
from .catalog import TABLE, VIEW, Catalog, TriggerCache

logger = logging.getLogger(__name__)

RULE = "-- ----------------------------"
APP_NAME = "mysqldump-py"


class DumpWriter:
    """
    Writes dump blocks for the tables of the currently selected database.

    Attributes:
        bytes_written: Characters written to the sink so far
        rows_written: Rows rendered as INSERT values so far
    """

    def __init__(
        self,
        catalog: Catalog,
        sink: TextIO,
        config: DumpConfig | None = None,
        metrics: DumpMetrics | None = None,
        triggers: TriggerCache | None = None,
    ):
        self.catalog = catalog
        self.sink = sink
        self.config = config or DumpConfig()
        self.metrics = metrics
        self.triggers = triggers or TriggerCache(catalog)
        self.bytes_written = 0
        self.rows_written = 0

    def _write(self, text: str) -> None:
        try:
            self.sink.write(text)
        except OSError as e:
            raise StreamIOError(f"Failed to write dump output: {e}") from e
        self.bytes_written += len(text)

    def _banner(self, *lines: str) -> None:
        self._write(RULE + "\n")
        for line in lines:
            self._write(f"-- {line}\n")
        self._write(RULE + "\n")

    def write_header(self, start: datetime) -> None:
        self._banner(
            "MySQL Database Dump",
            f"{APP_NAME} version: {__version__}",
            f"Start Time: {start:%Y-%m-%d %H:%M:%S}",
        )
        self._write("\n\n")
        self._write(
            "/*!40101 SET @OLD_SQL_MODE=@@SQL_MODE, "
            "SQL_MODE='NO_AUTO_VALUE_ON_ZERO' */;\n"
        )

    def write_footer(self, elapsed: timedelta) -> None:
        self._banner(f"Dumped by {APP_NAME}", f"Cost Time: {elapsed}")

    def write_use(self, database: str) -> None:
        self._write(f"USE {quote_identifier(database)};\n")

    def write_table(self, table: str) -> int:
        """
        Write structure, records and triggers of one base table.

        Returns:
            Number of rows written
        """
        if self.config.drop_table:
            self._write(f"DROP TABLE IF EXISTS {quote_identifier(table)};\n")

        self._banner(f"Table structure for {table}")
        self._write(self.catalog.create_table_sql(table) + ";\n\n")

        rows = 0
        if self.config.include_data:
            rows = self.write_records(table)
        self.write_triggers(table)
        return rows

    def write_view(self, view: str) -> None:
        if self.config.drop_table:
            self._write(f"DROP VIEW IF EXISTS {quote_identifier(view)};\n")

        self._banner(f"View structure for {view}")
        self._write(self.catalog.create_view_sql(view) + ";\n\n")

    def write_records(self, table: str) -> int:
        """
        Write the records block of ``table``.

        A new INSERT starts every ``rows_per_insert`` rows; tables without
        rows get no INSERT at all.

        Returns:
            Number of rows written

        Raises:
            UnsupportedTypeError: If a column type cannot be rendered
            IntrospectionError: If the rows cannot be read
        """
        columns = self.catalog.columns(table)
        encoder = RowEncoder.from_catalog(
            columns,
            keep_fractional_seconds=self.config.keep_fractional_seconds,
            table=table,
        )
        quoted_table = quote_identifier(table)
        insert_head = (
            f"INSERT INTO {quoted_table} ("
            + ",".join(quote_identifier(name) for name, _ in columns)
            + ") VALUES\n"
        )
        per_insert = self.config.rows_per_insert

        self._banner(f"Records of {table}")
        self._write(f"LOCK TABLES {quoted_table} WRITE;\n")
        self._write(f"/*!40000 ALTER TABLE {quoted_table} DISABLE KEYS */;\n")

        count = 0
        # Closed right away when a write fails, draining the pending rows
        with closing(self.catalog.iter_rows(table, [name for name, _ in columns])) as rows:
            for row in rows:
                if count == 0:
                    self._write(insert_head)
                elif per_insert < 2 or count % per_insert == 0:
                    self._write(";\n" + insert_head)
                else:
                    self._write(",\n")
                self._write(encoder.encode_row(row))
                count += 1
        if count:
            self._write(";\n")

        self._write(f"/*!40000 ALTER TABLE {quoted_table} ENABLE KEYS */;\n")
        self._write("UNLOCK TABLES;\n\n")

        self.rows_written += count
        return count

    def write_triggers(self, table: str) -> None:
        definitions = self.triggers.for_table(table)
        if not definitions:
            return

        self._banner(f"Triggers of {table}")
        for definition in definitions:
            self._write("DELIMITER ;;\n")
            self._write('/*!50003 SET SESSION SQL_MODE="" */;;\n')
            self._write(definition.create_sql() + "\n")
            self._write("DELIMITER ;\n")
            self._write("/*!50003 SET SESSION SQL_MODE=@OLD_SQL_MODE */;\n\n")

    def write_database(self, database: str, use_db: bool) -> None:
        """Export every selected table and view of ``database``."""
        self.catalog.use_database(database)
        tables = list(self.config.tables) or self.catalog.list_tables()
        if use_db:
            self.write_use(database)

        for table in tables:
            table_log = ContextLogger(__name__, database=database, table=table)
            start = time.monotonic()

            with trace_operation(
                "export_table",
                kind=trace.SpanKind.INTERNAL,
                database=database,
                table=table,
            ) as span:
                kind = self.catalog.table_type(table)
                rows = 0
                if kind == TABLE:
                    rows = self.write_table(table)
                elif kind == VIEW:
                    self.write_view(table)
                else:
                    table_log.warning("Skipping object of unsupported table type")
                    continue
                span.set_attribute("rows", rows)

            duration = time.monotonic() - start
            table_log.debug(f"Exported {kind.lower()} with {rows} row(s)")
            if self.metrics:
                self.metrics.record_table(
                    database, table, rows, duration, kind=kind.lower()
                )


def _resolve_databases(
    target: ConnectionTarget, config: DumpConfig, catalog: Catalog
) -> list[str]:
    if config.all_databases:
        return catalog.list_databases()
    if config.databases:
        return list(config.databases)
    return [target.require_database()]


def dump(
    target: ConnectionTarget,
    config: DumpConfig | None = None,
    metrics: DumpMetrics | None = None,
    connection: Any = None,
) -> None:
    """
    Export databases from ``target`` as a replayable dump document.

    Args:
        target: Connection target; its database is exported when no
            databases are configured
        config: Export options (defaults to DumpConfig())
        metrics: Optional Prometheus metrics recorder
        connection: Existing connection to use; the caller keeps ownership

    Raises:
        DumpError: Any configuration, connection, catalog, encoding or
            output failure
    """
    config = config or DumpConfig()
    sink = config.sink or sys.stdout

    start = datetime.now()
    logger.info(f"[dump] start at {start:%Y-%m-%d %H:%M:%S}")

    owned: ManagedConnection | None = None
    writer: DumpWriter | None = None
    try:
        if not config.all_databases and not config.databases:
            target.require_database()
        if connection is None:
            connection = owned = open_connection(target, config.max_lifetime)

        catalog = Catalog(connection)
        writer = DumpWriter(catalog, sink, config, metrics, TriggerCache(catalog))
        writer.write_header(start)

        databases = _resolve_databases(target, config, catalog)
        use_db = config.use_db or len(databases) > 1
        with trace_operation(
            "dump", kind=trace.SpanKind.INTERNAL, databases=len(databases)
        ):
            for database in databases:
                writer.write_database(database, use_db)

        writer.write_footer(datetime.now() - start)
        try:
            sink.flush()
        except OSError as e:
            raise StreamIOError(f"Failed to flush dump output: {e}") from e
    except DumpError as e:
        context = {"error_type": type(e).__name__}
        if getattr(e, "table", None):
            context["table"] = e.table
        logger.error(f"Dump failed: {e}", extra=context)
        if metrics:
            metrics.record_failure(e)
        raise
    finally:
        if owned is not None:
            owned.close()
        if metrics and writer is not None:
            metrics.record_bytes(writer.bytes_written)

    end = datetime.now()
    logger.info(
        f"[dump] end at {end:%Y-%m-%d %H:%M:%S}, cost {end - start}",
        extra={"rows": writer.rows_written},
    )
