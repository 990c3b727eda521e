"""
Connection target resolution and observability setup for the CLI.

Command-line arguments win over environment variables; a ``--dsn``
replaces ``MYSQL_DSN`` and the individual options override its parts.
"""

import argparse
import logging
import os
from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from ..config import ConnectionTarget
from ..errors import ConfigurationError
from ..utils.logging import setup_logging
from ..utils.metrics import MetricsPublisher
from ..utils.tracing import initialize_tracing

logger = logging.getLogger(__name__)

_TARGET_ARGUMENTS = ('host', 'port', 'user', 'password', 'database')


def get_connection_target(
    args: argparse.Namespace,
    environ: Mapping[str, str] | None = None,
) -> ConnectionTarget:
    """
    Build the connection target from args, falling back to MYSQL_* variables

    Args:
        args: Parsed command-line arguments
        environ: Environment mapping (default: os.environ)

    Returns:
        ConnectionTarget

    Raises:
        ConfigurationError: If the DSN or a variable is invalid
    """
    if args.dsn:
        target = ConnectionTarget.from_dsn(args.dsn)
    else:
        target = ConnectionTarget.from_env(environ)

    overrides: dict[str, Any] = {}
    for name in _TARGET_ARGUMENTS:
        value = getattr(args, name, None)
        if value is not None:
            overrides[name] = value
    if overrides:
        target = replace(target, **overrides)

    logger.debug(
        f"Connecting to {target.host}:{target.port} as {target.user}",
        extra={"database": target.database},
    )
    return target


def setup_observability(args: argparse.Namespace) -> None:
    """
    Configure logging, tracing and the metrics endpoint from global options

    Tracing is only initialized when spans have somewhere to go.

    Args:
        args: Parsed command-line arguments

    Raises:
        ConfigurationError: If the metrics port is unavailable
    """
    setup_logging(
        level=args.log_level,
        log_file=args.log_file,
        json_format=args.log_json,
    )
    if args.trace_console or os.getenv("OTLP_ENDPOINT"):
        initialize_tracing(console_export=args.trace_console)

    if args.metrics_port:
        try:
            MetricsPublisher(port=args.metrics_port).start()
        except RuntimeError as e:
            raise ConfigurationError(str(e)) from e
