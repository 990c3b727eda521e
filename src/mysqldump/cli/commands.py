"""
CLI command implementations.

This module contains the implementation of the two CLI commands:
- dump: Export databases as a SQL dump document
- source: Replay a dump document into a database
"""

import argparse
import logging
import sys

from ..config import DumpConfig, SourceConfig
from ..errors import StreamIOError
from ..export import dump
from ..replay import source
from ..utils.metrics import DumpMetrics, ReplayMetrics
from .credentials import get_connection_target

logger = logging.getLogger(__name__)


def cmd_dump(args: argparse.Namespace) -> None:
    """
    Export databases as a SQL dump

    Args:
        args: Parsed command-line arguments

    Raises:
        DumpError: If the export fails
    """
    target = get_connection_target(args)
    metrics = DumpMetrics() if args.metrics_port else None

    if args.output:
        try:
            sink = open(args.output, 'w', encoding='utf-8')
        except OSError as e:
            raise StreamIOError(f"Cannot open output file {args.output}: {e}") from e
    else:
        sink = sys.stdout

    try:
        config = DumpConfig(
            drop_table=args.drop_table,
            include_data=args.data,
            tables=args.tables,
            databases=args.databases,
            all_databases=args.all_databases,
            use_db=args.use_db,
            rows_per_insert=args.rows_per_insert,
            keep_fractional_seconds=args.keep_fractional_seconds,
            sink=sink,
            max_lifetime=args.max_lifetime,
        )
        dump(target, config, metrics=metrics)
    finally:
        if sink is not sys.stdout:
            sink.close()

    if args.output:
        logger.info(f"Dump written to {args.output}")


def cmd_source(args: argparse.Namespace) -> None:
    """
    Replay a SQL dump into a database

    Args:
        args: Parsed command-line arguments

    Raises:
        DumpError: If the replay fails
    """
    target = get_connection_target(args)
    config = SourceConfig(
        dry_run=args.dry_run,
        merge_size=args.merge_insert,
        debug=args.debug,
        strict=args.strict,
        check_prefix=args.check_prefix,
        max_lifetime=args.max_lifetime,
    )
    metrics = ReplayMetrics() if args.metrics_port else None

    if args.input:
        try:
            stream = open(args.input, 'rb')
        except OSError as e:
            raise StreamIOError(f"Cannot open input file {args.input}: {e}") from e
    else:
        stream = sys.stdin.buffer

    try:
        result = source(target, stream, config, metrics=metrics)
    finally:
        if args.input:
            stream.close()

    mode = "checked" if result.dry_run else "applied"
    logger.info(
        f"{result.statements} statement(s) {mode}, "
        f"{result.inserts_merged} INSERT(s) merged"
    )
