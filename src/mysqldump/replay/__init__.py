"""
Dump replay engine.

Components:
- splitter: cuts a stream into statements at a delimiter
- batcher: merges consecutive INSERT statements
- executor: applies statements in one transaction
- source: the replay operation tying them together
"""

from .batcher import InsertBatcher, insert_prefix, is_insert, merge_inserts
from .executor import ReplayExecutor, ReplayResult
from .source import source
from .splitter import StatementSplitter, trim_statement

__all__ = [
    "StatementSplitter",
    "trim_statement",
    "InsertBatcher",
    "merge_inserts",
    "is_insert",
    "insert_prefix",
    "ReplayExecutor",
    "ReplayResult",
    "source",
]
