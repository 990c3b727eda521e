"""
Catalog queries used by the export path.

Thin wrappers over ``SHOW`` statements and INFORMATION_SCHEMA lookups. Every
driver failure surfaces as IntrospectionError naming the table involved.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

import mysql.connector
from opentelemetry import trace

from ..errors import DatabaseConnectionError, IntrospectionError
from ..utils.sql_safety import quote_identifier
from ..utils.tracing import trace_operation

logger = logging.getLogger(__name__)

TABLE = "TABLE"
VIEW = "VIEW"

_TABLE_TYPES = {
    "BASE TABLE": TABLE,
    "VIEW": VIEW,
}

DEFAULT_FETCH_SIZE = 1000


@dataclass(frozen=True)
class TriggerDefinition:
    """One row of ``SHOW TRIGGERS``."""

    trigger: str
    event: str
    table: str
    statement: str
    timing: str

    def create_sql(self) -> str:
        return (
            f"/*!50003 CREATE TRIGGER {quote_identifier(self.trigger)} "
            f"{self.timing} {self.event} ON {quote_identifier(self.table)} "
            f"FOR EACH ROW {self.statement} */;;"
        )


class Catalog:
    """
    Catalog lookups over one connection.

    Queries run against the currently selected database; call
    ``use_database`` before listing or describing tables.
    """

    def __init__(self, connection: Any, fetch_size: int = DEFAULT_FETCH_SIZE):
        self.connection = connection
        self.fetch_size = fetch_size
        self.database: str | None = None

    def _query(
        self,
        query: str,
        params: tuple | None = None,
        table: str | None = None,
    ) -> tuple[list[str], list[tuple]]:
        cursor = self.connection.cursor()
        try:
            cursor.execute(query, params)
            rows = cursor.fetchall()
            columns = [d[0] for d in cursor.description or ()]
        except mysql.connector.Error as e:
            raise IntrospectionError(f"Catalog query failed: {e}", table=table) from e
        finally:
            cursor.close()
        return columns, rows

    def list_databases(self) -> list[str]:
        with trace_operation("list_databases", kind=trace.SpanKind.CLIENT):
            _, rows = self._query("SHOW DATABASES")
        return [_as_text(row[0]) for row in rows]

    def use_database(self, database: str) -> None:
        """
        Select ``database`` for the following catalog queries.

        Raises:
            DatabaseConnectionError: If the database cannot be selected
        """
        cursor = self.connection.cursor()
        try:
            cursor.execute(f"USE {quote_identifier(database)}")
        except mysql.connector.Error as e:
            raise DatabaseConnectionError(
                f"Cannot select database {database!r}: {e}"
            ) from e
        finally:
            cursor.close()
        self.database = database

    def list_tables(self) -> list[str]:
        with trace_operation(
            "list_tables", kind=trace.SpanKind.CLIENT, database=self.database
        ):
            _, rows = self._query("SHOW TABLES")
        return [_as_text(row[0]) for row in rows]

    def table_type(self, table: str) -> str | None:
        """
        Return ``TABLE``, ``VIEW`` or None for other kinds.

        Raises:
            IntrospectionError: If the table does not exist or the query fails
        """
        _, rows = self._query(
            "SELECT TABLE_TYPE FROM INFORMATION_SCHEMA.TABLES "
            "WHERE TABLE_SCHEMA = DATABASE() AND TABLE_NAME = %s",
            (table,),
            table=table,
        )
        if not rows:
            raise IntrospectionError(f"Table not found: {table}", table=table)
        return _TABLE_TYPES.get(_as_text(rows[0][0]))

    def create_table_sql(self, table: str) -> str:
        """``SHOW CREATE TABLE`` output rewritten to ``CREATE TABLE IF NOT EXISTS``."""
        _, rows = self._query(
            f"SHOW CREATE TABLE {quote_identifier(table)}", table=table
        )
        if not rows:
            raise IntrospectionError(f"No definition for table: {table}", table=table)
        return _as_text(rows[0][1]).replace("CREATE TABLE", "CREATE TABLE IF NOT EXISTS", 1)

    def create_view_sql(self, view: str) -> str:
        _, rows = self._query(f"SHOW CREATE TABLE {quote_identifier(view)}", table=view)
        if not rows:
            raise IntrospectionError(f"No definition for view: {view}", table=view)
        return _as_text(rows[0][1])

    def columns(self, table: str) -> list[tuple[str, str]]:
        """
        Return ``(column_name, data_type)`` pairs in ordinal order.

        Raises:
            IntrospectionError: If the table has no columns or the query fails
        """
        _, rows = self._query(
            "SELECT COLUMN_NAME, DATA_TYPE FROM INFORMATION_SCHEMA.COLUMNS "
            "WHERE TABLE_SCHEMA = DATABASE() AND TABLE_NAME = %s "
            "ORDER BY ORDINAL_POSITION",
            (table,),
            table=table,
        )
        if not rows:
            raise IntrospectionError(f"No columns found for table: {table}", table=table)
        return [(_as_text(name), _as_text(data_type)) for name, data_type in rows]

    def iter_rows(self, table: str, column_names: list[str]) -> Iterator[tuple]:
        """
        Yield every row of ``table`` with columns in the given order.

        Rows are fetched ``fetch_size`` at a time. When the generator is
        closed early, the rows still pending on the connection are read and
        discarded so the connection stays usable.
        """
        column_list = ",".join(quote_identifier(name) for name in column_names)
        query = f"SELECT {column_list} FROM {quote_identifier(table)}"

        cursor = self.connection.cursor()
        unread = False
        try:
            cursor.execute(query)
            unread = True
            while True:
                batch = cursor.fetchmany(self.fetch_size)
                if not batch:
                    unread = False
                    break
                yield from batch
        except mysql.connector.Error as e:
            unread = False
            raise IntrospectionError(
                f"Failed to read rows: {e}", table=table
            ) from e
        finally:
            if unread:
                self._discard_unread(cursor, table)
            cursor.close()

    def _discard_unread(self, cursor: Any, table: str) -> None:
        try:
            while cursor.fetchmany(self.fetch_size):
                pass
        except mysql.connector.Error as e:
            logger.warning(f"Failed to discard unread rows: {e}", extra={"table": table})

    def triggers(self) -> list[TriggerDefinition]:
        """All triggers of the selected database."""
        with trace_operation(
            "list_triggers", kind=trace.SpanKind.CLIENT, database=self.database
        ):
            columns, rows = self._query("SHOW TRIGGERS")

        triggers = []
        for row in rows:
            values = dict(zip(columns, row))
            triggers.append(
                TriggerDefinition(
                    trigger=_as_text(values.get("Trigger", "")),
                    event=_as_text(values.get("Event", "")),
                    table=_as_text(values.get("Table", "")),
                    statement=_as_text(values.get("Statement", "")),
                    timing=_as_text(values.get("Timing", "")),
                )
            )
        return triggers


def _as_text(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8")
    return str(value)


class TriggerCache:
    """
    Trigger definitions keyed by table, loaded once per database.

    Created for one export run and discarded with it.
    """

    def __init__(self, catalog: Catalog):
        self.catalog = catalog
        self._by_database: dict[str, dict[str, list[TriggerDefinition]]] = {}

    def for_table(self, table: str) -> list[TriggerDefinition]:
        database = self.catalog.database or ""
        by_table = self._by_database.get(database)
        if by_table is None:
            by_table = {}
            for definition in self.catalog.triggers():
                by_table.setdefault(definition.table, []).append(definition)
            self._by_database[database] = by_table
            logger.debug(
                f"Loaded triggers for {len(by_table)} table(s)",
                extra={"database": database},
            )
        return by_table.get(table, [])
