"""
Statement splitting for dump replay.

Cuts a character or byte stream into statements at every occurrence of a
single delimiter character. The delimiter is matched positionally: a
delimiter inside a quoted string or a comment still ends the statement.
Text values holding the delimiter are therefore cut apart, and client-side
``DELIMITER ;;`` blocks, such as the trigger blocks of a dump, are not
recognised.
"""

import codecs
import logging
from collections.abc import Iterator
from typing import IO, Any

from ..errors import IncompleteStatementError, StreamIOError

logger = logging.getLogger(__name__)

DEFAULT_DELIMITER = ";"
DEFAULT_CHUNK_SIZE = 64 * 1024


def trim_statement(text: str) -> str:
    """Strip leading newlines, then surrounding whitespace."""
    return text.lstrip("\n").strip()


def is_comment_only(text: str) -> bool:
    """Whether every non-blank line of ``text`` is a ``--`` or ``#`` comment."""
    return all(
        line.lstrip().startswith(("--", "#"))
        for line in text.splitlines()
        if line.strip()
    )


class StatementSplitter:
    """
    Lazy, finite, non-restartable iterator of trimmed statements.

    Each yielded statement has its delimiter removed and is never empty.
    When the stream ends without a final delimiter the trailing fragment is
    dropped with a warning, or raises IncompleteStatementError when
    ``strict`` is set. Trailing comment lines (such as a dump footer) are
    not a fragment.

    Example:
        >>> list(StatementSplitter(io.StringIO("A;B;")))
        ['A', 'B']
    """

    def __init__(
        self,
        stream: IO[Any],
        delimiter: str = DEFAULT_DELIMITER,
        strict: bool = False,
        encoding: str = "utf-8",
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        if len(delimiter) != 1:
            raise ValueError(f"delimiter must be a single character, got {delimiter!r}")
        self.stream = stream
        self.delimiter = delimiter
        self.strict = strict
        self.encoding = encoding
        self.chunk_size = chunk_size
        self.statements_read = 0
        self._statements = self._split()

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        return next(self._statements)

    def _read_chunks(self) -> Iterator[str]:
        decoder = None
        while True:
            try:
                chunk = self.stream.read(self.chunk_size)
            except OSError as e:
                raise StreamIOError(f"Failed to read statement stream: {e}") from e

            if isinstance(chunk, (bytes, bytearray)):
                if decoder is None:
                    decoder = codecs.getincrementaldecoder(self.encoding)()
                try:
                    text = decoder.decode(chunk, final=not chunk)
                except UnicodeDecodeError as e:
                    raise StreamIOError(
                        f"Statement stream is not valid {self.encoding}: {e}"
                    ) from e
            else:
                text = chunk

            if not chunk:
                if text:
                    yield text
                return
            yield text

    def _split(self) -> Iterator[str]:
        buffer = ""
        for text in self._read_chunks():
            search_from = len(buffer)
            buffer += text
            start = 0
            while True:
                index = buffer.find(self.delimiter, search_from)
                if index < 0:
                    break
                statement = trim_statement(buffer[start:index])
                start = search_from = index + 1
                if statement:
                    self.statements_read += 1
                    yield statement
            buffer = buffer[start:]

        remainder = trim_statement(buffer)
        if remainder and not is_comment_only(remainder):
            if self.strict:
                raise IncompleteStatementError(remainder)
            logger.warning(
                "Dropping unterminated statement at end of stream",
                extra={"fragment": remainder[:200]},
            )
