"""
Command-line interface for MySQL dump export and replay.

Available commands:
- dump: Export databases as a SQL dump document
- source: Replay a dump document into a database
"""

import logging
import sys

from ..errors import DumpError
from ..utils.logging import shutdown_logging
from ..utils.tracing import shutdown_tracing
from .commands import cmd_dump, cmd_source
from .credentials import get_connection_target, setup_observability
from .parser import create_parser

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the mysqldump-py CLI"""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command not in ('dump', 'source'):
        parser.print_help()
        sys.exit(1)

    try:
        setup_observability(args)
        if args.command == 'dump':
            cmd_dump(args)
        else:
            cmd_source(args)
    except DumpError as e:
        logger.error(f"{args.command} failed: {e}")
        sys.exit(1)
    finally:
        shutdown_tracing()
        shutdown_logging()


__all__ = [
    'main',
    'setup_observability',
    'get_connection_target',
    'cmd_dump',
    'cmd_source',
    'create_parser',
]


if __name__ == '__main__':
    main()
