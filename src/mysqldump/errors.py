"""
Error hierarchy for dump and replay operations.

Every error aborts the current export or replay in full. Each subclass
carries the context (table, statement text, type name) needed to diagnose
the failure without re-running it.
"""

from typing import Any

# Long statements are cut in messages; the full text stays on the exception.
_PREVIEW_LENGTH = 200


def _preview(statement: str) -> str:
    if len(statement) <= _PREVIEW_LENGTH:
        return statement
    return statement[:_PREVIEW_LENGTH] + "..."


class DumpError(Exception):
    """Base exception for dump and replay errors."""

    pass


class ConfigurationError(DumpError):
    """Raised when an option or connection target is invalid."""

    pass


class DatabaseConnectionError(DumpError):
    """Raised when a connection cannot be opened or a schema cannot be selected."""

    pass


class IntrospectionError(DumpError):
    """Raised when a catalog query fails."""

    def __init__(self, message: str, table: str | None = None):
        self.table = table
        if table:
            message = f"{message} (table: {table})"
        super().__init__(message)


class UnsupportedTypeError(DumpError):
    """Raised when a column type has no literal rendering rule."""

    def __init__(
        self, type_name: str, column: str | None = None, table: str | None = None
    ):
        self.type_name = type_name
        self.column = column
        self.table = table
        location = []
        if table:
            location.append(f"table: {table}")
        if column:
            location.append(f"column: {column}")
        message = f"unsupported type: {type_name}"
        if location:
            message += f" ({', '.join(location)})"
        super().__init__(message)


class StreamIOError(DumpError):
    """Raised when reading the input stream or writing the dump sink fails."""

    pass


class MalformedStatementError(DumpError):
    """Raised when a batched insert has no VALUES keyword."""

    def __init__(self, statement: str):
        self.statement = statement
        super().__init__(
            f"invalid SQL: missing VALUES keyword: {_preview(statement)}"
        )


class EmptyBatchError(DumpError):
    """Raised when an insert merge is requested with no statements."""

    def __init__(self) -> None:
        super().__init__("no input provided")


class IncompleteStatementError(DumpError):
    """Raised in strict mode when the stream ends without a final delimiter."""

    def __init__(self, fragment: str):
        self.fragment = fragment
        super().__init__(
            f"stream ended inside an unterminated statement: {_preview(fragment)}"
        )


class ExecutionError(DumpError):
    """Raised when the target connection rejects a statement during replay."""

    def __init__(self, statement: str, cause: Any = None):
        self.statement = statement
        self.cause = cause
        message = f"statement failed: {_preview(statement)}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


__all__ = [
    "DumpError",
    "ConfigurationError",
    "DatabaseConnectionError",
    "IntrospectionError",
    "UnsupportedTypeError",
    "StreamIOError",
    "MalformedStatementError",
    "EmptyBatchError",
    "IncompleteStatementError",
    "ExecutionError",
]
