"""
Insert batching for dump replay.

Folds runs of consecutive single-row ``INSERT INTO`` statements into one
multi-row INSERT to cut round trips. Only neighbours in stream order are
merged; statements are never reordered.

    INSERT INTO `test` VALUES (1, 'a');
    INSERT INTO `test` VALUES (2, 'b');

becomes

    INSERT INTO `test` VALUES (1, 'a'), (2, 'b');
"""

import logging
from collections.abc import Iterable, Iterator, Sequence

from ..errors import EmptyBatchError, MalformedStatementError

logger = logging.getLogger(__name__)

INSERT_PREFIX = "INSERT INTO"
VALUES_KEYWORD = "VALUES"

_END = object()


def is_insert(statement: str) -> bool:
    return statement.startswith(INSERT_PREFIX)


def insert_prefix(statement: str) -> str | None:
    """
    Return the table and column list part of an INSERT, whitespace-normalized.

    Returns None when the statement has no VALUES keyword.
    """
    index = statement.find(VALUES_KEYWORD)
    if index < 0:
        return None
    return " ".join(statement[:index].split())


def merge_inserts(statements: Sequence[str], delimiter: str = ";") -> str:
    """
    Merge INSERT statements into one multi-row INSERT.

    The first statement is kept whole; every later statement contributes the
    value list following its first VALUES keyword. Table and column lists of
    the later statements are not compared.

    Args:
        statements: INSERT statements, with or without trailing delimiter
        delimiter: Statement terminator

    Returns:
        The merged statement, terminated by one delimiter

    Raises:
        EmptyBatchError: If no statements are given
        MalformedStatementError: If a later statement has no VALUES keyword
    """
    if not statements:
        raise EmptyBatchError()

    parts = [statements[0].removesuffix(delimiter)]
    for statement in statements[1:]:
        index = statement.find(VALUES_KEYWORD)
        if index < 0:
            raise MalformedStatementError(statement)
        parts.append(statement[index + len(VALUES_KEYWORD):].removesuffix(delimiter))
    return ",".join(parts) + delimiter


class InsertBatcher:
    """
    Iterator that merges up to ``merge_size`` consecutive INSERT statements.

    A merge size of 1 or less passes every statement through untouched. A
    statement that ends a batch early is yielded unmerged right after the
    batch; nothing is dropped.

    Attributes:
        batches: Number of merged statements produced
        merged_statements: Number of input INSERTs folded into those batches
    """

    def __init__(
        self,
        statements: Iterable[str],
        merge_size: int,
        check_prefix: bool = False,
        delimiter: str = ";",
    ):
        """
        Args:
            statements: Trimmed statements in stream order
            merge_size: Maximum number of INSERTs per merged statement
            check_prefix: Also end a batch when the table or column list changes
            delimiter: Statement terminator appended to merged statements
        """
        self.merge_size = merge_size
        self.check_prefix = check_prefix
        self.delimiter = delimiter
        self.batches = 0
        self.merged_statements = 0
        self._source = iter(statements)
        self._statements = self._batch()

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        return next(self._statements)

    def _joins_batch(self, candidate: str, prefix: str | None) -> bool:
        if not is_insert(candidate):
            return False
        return not self.check_prefix or insert_prefix(candidate) == prefix

    def _batch(self) -> Iterator[str]:
        pending: object = _END
        while True:
            if pending is not _END:
                statement, pending = pending, _END
            else:
                statement = next(self._source, _END)
                if statement is _END:
                    return

            if self.merge_size <= 1 or not is_insert(statement):
                yield statement
                continue

            batch = [statement]
            prefix = insert_prefix(statement) if self.check_prefix else None
            while len(batch) < self.merge_size:
                candidate = next(self._source, _END)
                if candidate is _END:
                    break
                if not self._joins_batch(candidate, prefix):
                    pending = candidate
                    break
                batch.append(candidate)

            if len(batch) == 1:
                yield statement
                continue

            merged = merge_inserts(batch, self.delimiter)
            self.batches += 1
            self.merged_statements += len(batch)
            logger.debug(f"Merged {len(batch)} INSERT statements")
            yield merged
