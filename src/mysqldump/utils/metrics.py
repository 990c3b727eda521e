"""
Prometheus metrics for dump and replay runs.

Usage:
    from mysqldump.utils.metrics import DumpMetrics, MetricsPublisher

    publisher = MetricsPublisher(port=9091)
    publisher.start()

    metrics = DumpMetrics()
    metrics.record_table("shop", "orders", rows=1200, duration=0.8)
"""

import logging
from typing import Optional

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Histogram,
    start_http_server,
)

logger = logging.getLogger(__name__)


class MetricsPublisher:
    """
    Exposes a registry on an HTTP ``/metrics`` endpoint.
    """

    def __init__(
        self,
        port: int = 9091,
        registry: Optional[CollectorRegistry] = None,
    ):
        self.port = port
        self.registry = registry or REGISTRY
        self._server_started = False

    def start(self) -> None:
        """Start the metrics HTTP server"""
        if self._server_started:
            logger.warning(f"Metrics server already running on port {self.port}")
            return

        try:
            start_http_server(self.port, registry=self.registry)
        except OSError as e:
            raise RuntimeError(
                f"Metrics server port {self.port} is unavailable: {e}"
            ) from e
        self._server_started = True
        logger.info(f"Metrics server started on port {self.port}")

    def is_started(self) -> bool:
        return self._server_started


class DumpMetrics:
    """
    Metrics for export runs

    Tracks exported tables and rows, bytes written and per-table duration.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """
        Args:
            registry: Custom Prometheus registry (default: global REGISTRY)
        """
        self.registry = registry or REGISTRY

        self.tables_exported_total = Counter(
            "mysqldump_tables_exported_total",
            "Total number of tables and views exported",
            ["database", "kind"],
            registry=self.registry,
        )

        self.rows_exported_total = Counter(
            "mysqldump_rows_exported_total",
            "Total number of rows written as INSERT values",
            ["database", "table"],
            registry=self.registry,
        )

        self.bytes_written_total = Counter(
            "mysqldump_bytes_written_total",
            "Total number of characters written to the dump sink",
            registry=self.registry,
        )

        self.table_duration_seconds = Histogram(
            "mysqldump_table_duration_seconds",
            "Time spent exporting one table",
            ["database"],
            buckets=(0.01, 0.05, 0.1, 0.5, 1, 5, 10, 30, 60, 300, 1800),
            registry=self.registry,
        )

        self.dump_failures_total = Counter(
            "mysqldump_dump_failures_total",
            "Total number of aborted export runs",
            ["error_type"],
            registry=self.registry,
        )

    def record_table(
        self,
        database: str,
        table: str,
        rows: int,
        duration: float,
        kind: str = "table",
    ) -> None:
        """
        Record one exported table or view

        Args:
            database: Schema the table belongs to
            table: Table name
            rows: Number of rows exported (0 for views and schema-only dumps)
            duration: Export time in seconds
            kind: "table" or "view"
        """
        self.tables_exported_total.labels(database=database, kind=kind).inc()
        if rows:
            self.rows_exported_total.labels(database=database, table=table).inc(rows)
        self.table_duration_seconds.labels(database=database).observe(duration)

    def record_bytes(self, count: int) -> None:
        self.bytes_written_total.inc(count)

    def record_failure(self, error: Exception) -> None:
        self.dump_failures_total.labels(error_type=type(error).__name__).inc()


class ReplayMetrics:
    """
    Metrics for replay runs

    Tracks executed statements, merged inserts, failures and run duration.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or REGISTRY

        self.statements_total = Counter(
            "mysqldump_replay_statements_total",
            "Total number of statements replayed",
            ["mode"],
            registry=self.registry,
        )

        self.inserts_merged_total = Counter(
            "mysqldump_replay_inserts_merged_total",
            "Total number of INSERT statements folded into batched inserts",
            registry=self.registry,
        )

        self.failures_total = Counter(
            "mysqldump_replay_failures_total",
            "Total number of aborted replay runs",
            ["error_type"],
            registry=self.registry,
        )

        self.replay_duration_seconds = Histogram(
            "mysqldump_replay_duration_seconds",
            "Duration of replay runs in seconds",
            buckets=(0.1, 0.5, 1, 5, 10, 30, 60, 300, 1800, 3600),
            registry=self.registry,
        )

    def record_statement(self, dry_run: bool = False) -> None:
        self.statements_total.labels(mode="dry_run" if dry_run else "executed").inc()

    def record_merged(self, count: int) -> None:
        """Record ``count`` inserts folded into batched statements."""
        if count:
            self.inserts_merged_total.inc(count)

    def record_run(self, duration: float) -> None:
        self.replay_duration_seconds.observe(duration)

    def record_failure(self, error: Exception) -> None:
        self.failures_total.labels(error_type=type(error).__name__).inc()
