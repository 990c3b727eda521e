"""
Row encoding into MySQL literal text.

Converts the typed values of one decoded row into the literal fragments
embedded in INSERT statements. The rendering rule for every ColumnType is
held in a closed dispatch table; a type without a rule fails at import time
rather than at dump time.

Known limitations carried over from the dump format:
- DATETIME/TIMESTAMP values lose sub-second precision unless the encoder is
  built with ``keep_fractional_seconds=True``.
- ENUM, SET and JSON values are quoted verbatim without escaping.
- Only newline, carriage return, single quote and double quote are escaped
  in text values; backslashes are written as-is.
"""

import datetime
from collections.abc import Callable, Iterable, Sequence
from decimal import Decimal
from typing import Any

from .types import ColumnType

NULL = "NULL"

_TEXT_ESCAPES = str.maketrans({
    "\n": "\\n",
    "\r": "\\r",
    "'": "\\'",
    '"': '\\"',
})


def escape_string(text: str) -> str:
    """Escape newline, carriage return and both quote characters."""
    return text.translate(_TEXT_ESCAPES)


def _mismatch(value: Any, column_type: ColumnType) -> TypeError:
    return TypeError(
        f"cannot encode {type(value).__name__} value as {column_type.value}"
    )


def _raw_text(value: Any) -> str | None:
    """Return the driver's raw textual form of a value, if it has one."""
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8")
    return None


def _quoted(text: str) -> str:
    return f"'{text}'"


def _encode_integer(value: Any) -> str:
    if isinstance(value, int):
        return str(int(value))
    raw = _raw_text(value)
    if raw is None:
        raise _mismatch(value, ColumnType.INTEGER)
    return raw


def _encode_float(value: Any) -> str:
    if isinstance(value, float):
        text = repr(value)
        if "e" in text or "E" in text:
            # Shortest round-trip digits, laid out without an exponent
            return format(Decimal(text), "f")
        return text
    if isinstance(value, int):
        return str(int(value))
    raw = _raw_text(value)
    if raw is None:
        raise _mismatch(value, ColumnType.FLOAT)
    return raw


def _encode_decimal(value: Any) -> str:
    if isinstance(value, Decimal):
        # str() would switch to scientific notation for values like 0E-10
        return format(value, "f")
    raw = _raw_text(value)
    if raw is None:
        raise _mismatch(value, ColumnType.DECIMAL)
    return raw


def _format_date(value: datetime.date) -> str:
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def _format_clock(value: datetime.datetime) -> str:
    return f"{value.hour:02d}:{value.minute:02d}:{value.second:02d}"


def _encode_date(value: Any) -> str:
    if not isinstance(value, datetime.date):
        raise _mismatch(value, ColumnType.DATE)
    return _quoted(_format_date(value))


def _encode_datetime(value: Any) -> str:
    if not isinstance(value, datetime.datetime):
        raise _mismatch(value, ColumnType.DATETIME)
    return _quoted(f"{_format_date(value)} {_format_clock(value)}")


def _encode_datetime_fractional(value: Any) -> str:
    if not isinstance(value, datetime.datetime):
        raise _mismatch(value, ColumnType.DATETIME)
    text = f"{_format_date(value)} {_format_clock(value)}"
    if value.microsecond:
        text += f".{value.microsecond:06d}"
    return _quoted(text)


def format_duration(value: datetime.timedelta) -> str:
    """
    Render a TIME duration the way MySQL prints it.

    Hours are not wrapped at 24 and negative durations carry a leading
    minus sign; a fractional part is only written when present.
    """
    negative = value < datetime.timedelta(0)
    if negative:
        value = -value
    total_seconds = value.days * 86400 + value.seconds
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    text = f"{'-' if negative else ''}{hours:02d}:{minutes:02d}:{seconds:02d}"
    if value.microseconds:
        text += f".{value.microseconds:06d}"
    return text


def _encode_time(value: Any) -> str:
    if isinstance(value, datetime.timedelta):
        return _quoted(format_duration(value))
    if isinstance(value, datetime.time):
        text = f"{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
        if value.microsecond:
            text += f".{value.microsecond:06d}"
        return _quoted(text)
    raw = _raw_text(value)
    if raw is None:
        raise _mismatch(value, ColumnType.TIME)
    return _quoted(raw)


def _encode_year(value: Any) -> str:
    if isinstance(value, int):
        return str(int(value))
    raw = _raw_text(value)
    if raw is None:
        raise _mismatch(value, ColumnType.YEAR)
    return raw


def _encode_text(value: Any) -> str:
    raw = _raw_text(value)
    if raw is None:
        raise _mismatch(value, ColumnType.TEXT)
    return _quoted(escape_string(raw))


def _encode_binary(value: Any) -> str:
    if isinstance(value, int) and not isinstance(value, bool):
        # BIT columns arrive as integers; render their big-endian bytes
        value = value.to_bytes(max(1, (value.bit_length() + 7) // 8), "big")
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise _mismatch(value, ColumnType.BINARY)
    data = bytes(value)
    if not data:
        return "''"
    return "0x" + data.hex().upper()


def _encode_enum(value: Any) -> str:
    raw = _raw_text(value)
    if raw is None:
        raise _mismatch(value, ColumnType.ENUM)
    return _quoted(raw)


def _encode_set(value: Any) -> str:
    if isinstance(value, (set, frozenset)):
        return _quoted(",".join(sorted(str(member) for member in value)))
    raw = _raw_text(value)
    if raw is None:
        raise _mismatch(value, ColumnType.SET)
    return _quoted(raw)


def _encode_boolean(value: Any) -> str:
    if not isinstance(value, int):
        raise _mismatch(value, ColumnType.BOOLEAN)
    return "true" if value else "false"


def _encode_json(value: Any) -> str:
    raw = _raw_text(value)
    if raw is None:
        raise _mismatch(value, ColumnType.JSON)
    return _quoted(raw)


_ENCODERS: dict[ColumnType, Callable[[Any], str]] = {
    ColumnType.INTEGER: _encode_integer,
    ColumnType.FLOAT: _encode_float,
    ColumnType.DECIMAL: _encode_decimal,
    ColumnType.DATE: _encode_date,
    ColumnType.DATETIME: _encode_datetime,
    ColumnType.TIMESTAMP: _encode_datetime,
    ColumnType.TIME: _encode_time,
    ColumnType.YEAR: _encode_year,
    ColumnType.TEXT: _encode_text,
    ColumnType.BINARY: _encode_binary,
    ColumnType.ENUM: _encode_enum,
    ColumnType.SET: _encode_set,
    ColumnType.BOOLEAN: _encode_boolean,
    ColumnType.JSON: _encode_json,
}

_FRACTIONAL_ENCODERS: dict[ColumnType, Callable[[Any], str]] = {
    **_ENCODERS,
    ColumnType.DATETIME: _encode_datetime_fractional,
    ColumnType.TIMESTAMP: _encode_datetime_fractional,
}

_missing = set(ColumnType) - set(_ENCODERS)
if _missing:
    raise RuntimeError(
        f"no literal encoder for column types: {sorted(t.value for t in _missing)}"
    )


def encode_value(
    value: Any,
    column_type: ColumnType,
    keep_fractional_seconds: bool = False,
) -> str:
    """
    Render one cell value as a MySQL literal.

    Args:
        value: Decoded cell value, None for SQL NULL
        column_type: Type family of the cell's column
        keep_fractional_seconds: Keep microseconds on DATETIME/TIMESTAMP

    Returns:
        Literal text ready to embed in an INSERT statement

    Raises:
        TypeError: If the value's Python type does not fit the column type
    """
    if value is None:
        return NULL
    encoders = _FRACTIONAL_ENCODERS if keep_fractional_seconds else _ENCODERS
    return encoders[column_type](value)


class RowEncoder:
    """
    Encodes the rows of one table.

    Built once per table from its column types and reused for every row;
    holds no state between rows.
    """

    def __init__(
        self,
        column_types: Sequence[ColumnType],
        keep_fractional_seconds: bool = False,
    ):
        self.column_types = tuple(column_types)
        self.keep_fractional_seconds = keep_fractional_seconds

    @classmethod
    def from_catalog(
        cls,
        columns: Sequence[tuple[str, str]],
        keep_fractional_seconds: bool = False,
        table: str | None = None,
    ) -> "RowEncoder":
        """
        Build an encoder from ``(column_name, type_name)`` catalog pairs.

        ``table`` only names the table in errors.

        Raises:
            UnsupportedTypeError: If any column type cannot be rendered
        """
        column_types = [
            ColumnType.from_type_name(type_name, column=name, table=table)
            for name, type_name in columns
        ]
        return cls(column_types, keep_fractional_seconds=keep_fractional_seconds)

    def encode_row(self, row: Sequence[Any]) -> str:
        """Render a row as ``(literal,literal,...)``."""
        if len(row) != len(self.column_types):
            raise ValueError(
                f"row has {len(row)} values, expected {len(self.column_types)}"
            )
        literals = [
            encode_value(value, column_type, self.keep_fractional_seconds)
            for value, column_type in zip(row, self.column_types)
        ]
        return "(" + ",".join(literals) + ")"

    def encode_rows(self, rows: Iterable[Sequence[Any]]) -> str:
        """Render several rows joined with commas."""
        return ",".join(self.encode_row(row) for row in rows)
