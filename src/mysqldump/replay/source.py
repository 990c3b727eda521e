"""
Replay operation: load a dump stream into a database.
"""

import logging
from datetime import datetime
from typing import IO, Any

from ..config import ConnectionTarget, SourceConfig
from ..connection import ManagedConnection, open_connection
from ..errors import DumpError
from ..utils.metrics import ReplayMetrics
from .batcher import InsertBatcher
from .executor import ReplayExecutor, ReplayResult
from .splitter import StatementSplitter

logger = logging.getLogger(__name__)


def source(
    target: ConnectionTarget,
    stream: IO[Any],
    config: SourceConfig | None = None,
    metrics: ReplayMetrics | None = None,
    connection: ManagedConnection | None = None,
) -> ReplayResult:
    """
    Replay a dump stream against the target database.

    Statements are split from ``stream``, optionally merged into batched
    INSERTs and applied in one transaction. A connection is opened (and
    closed afterwards) unless one is passed in or the run is a dry run.

    Args:
        target: Connection target; its database is the schema replayed into
        stream: Text or binary stream holding the dump
        config: Replay options (defaults to SourceConfig())
        metrics: Optional Prometheus metrics recorder
        connection: Existing connection to use; the caller keeps ownership

    Returns:
        ReplayResult describing the run

    Raises:
        DumpError: Any configuration, connection, stream or execution failure
    """
    config = config or SourceConfig()
    database = target.require_database()

    start = datetime.now()
    logger.info(f"[source] start at {start:%Y-%m-%d %H:%M:%S}")

    owned: ManagedConnection | None = None
    try:
        if connection is None and not config.dry_run:
            connection = owned = open_connection(target, config.max_lifetime)

        splitter = StatementSplitter(stream, config.delimiter, strict=config.strict)
        batcher = InsertBatcher(
            splitter,
            config.merge_size,
            check_prefix=config.check_prefix,
            delimiter=config.delimiter,
        )
        executor = ReplayExecutor(
            connection,
            database,
            dry_run=config.dry_run,
            debug=config.debug,
            metrics=metrics,
        )
        result = executor.run(batcher)
        result.inserts_merged = batcher.merged_statements
    except DumpError as e:
        logger.error(
            f"Replay failed: {e}",
            extra={"database": database, "error_type": type(e).__name__},
        )
        if metrics:
            metrics.record_failure(e)
        raise
    finally:
        if owned is not None:
            owned.close()

    if metrics:
        metrics.record_merged(result.inserts_merged)
        metrics.record_run(result.duration)

    end = datetime.now()
    logger.info(f"[source] end at {end:%Y-%m-%d %H:%M:%S}, cost {end - start}")
    return result
