"""
Single managed MySQL connection for one dump or replay invocation.

The connection is owned exclusively by the invocation that opened it and is
never shared. Its maximum lifetime is fixed once at setup; after that no new
cursors are handed out.
"""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

import mysql.connector
from opentelemetry import trace

from .config import DEFAULT_MAX_LIFETIME, ConnectionTarget
from .errors import DatabaseConnectionError
from .utils.tracing import trace_operation

logger = logging.getLogger(__name__)


@dataclass
class ManagedConnection:
    """Wrapper for a DB-API connection with a lifetime limit."""

    connection: Any
    max_lifetime: timedelta = timedelta(seconds=DEFAULT_MAX_LIFETIME)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def is_expired(self) -> bool:
        return datetime.now(UTC) - self.created_at > self.max_lifetime

    def cursor(self) -> Any:
        """
        Return a new cursor.

        Raises:
            DatabaseConnectionError: If the connection outlived its lifetime
        """
        if self.is_expired():
            raise DatabaseConnectionError(
                f"Connection exceeded its maximum lifetime of "
                f"{int(self.max_lifetime.total_seconds())}s"
            )
        return self.connection.cursor()

    def close(self) -> None:
        """Close the underlying connection; errors while closing are logged."""
        try:
            self.connection.close()
        except mysql.connector.Error as e:
            logger.warning(f"Error closing connection: {e}")

    def __enter__(self) -> "ManagedConnection":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def open_connection(
    target: ConnectionTarget,
    max_lifetime: int = DEFAULT_MAX_LIFETIME,
) -> ManagedConnection:
    """
    Open a MySQL connection for one invocation.

    Args:
        target: Host, credentials and optional default database
        max_lifetime: Lifetime limit in seconds

    Returns:
        ManagedConnection owning the new connection

    Raises:
        DatabaseConnectionError: If the server cannot be reached or rejects the login
    """
    with trace_operation(
        "mysql_connect",
        kind=trace.SpanKind.CLIENT,
        db_host=target.host,
        db_name=target.database or "",
    ):
        try:
            conn = mysql.connector.connect(**target.connect_kwargs())
        except mysql.connector.Error as e:
            raise DatabaseConnectionError(
                f"Cannot connect to {target.user}@{target.host}:{target.port}: {e}"
            ) from e

    logger.debug(
        "Connected to MySQL",
        extra={"host": target.host, "port": target.port, "database": target.database},
    )
    return ManagedConnection(connection=conn, max_lifetime=timedelta(seconds=max_lifetime))
