"""
Literal encoding for dumped row data.

Components:
- types: ColumnType families resolved from catalog type names
- encoder: RowEncoder and per-value literal rendering
"""

from .encoder import NULL, RowEncoder, encode_value, escape_string, format_duration
from .types import ColumnType, normalize_type_name

__all__ = [
    "ColumnType",
    "RowEncoder",
    "NULL",
    "encode_value",
    "escape_string",
    "format_duration",
    "normalize_type_name",
]
