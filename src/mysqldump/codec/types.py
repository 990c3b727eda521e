"""
Column type enumeration for literal rendering.

Maps the catalog-reported MySQL data type name of a column onto the closed
set of type families the row encoder knows how to render.
"""

from enum import Enum

from ..errors import UnsupportedTypeError


class ColumnType(str, Enum):
    """
    Enumeration of renderable column type families.

    Inherits from str so members compare equal to their value and serialize
    cleanly in logs and span attributes.
    """

    INTEGER = "integer"
    FLOAT = "float"
    DECIMAL = "decimal"
    DATE = "date"
    DATETIME = "datetime"
    TIMESTAMP = "timestamp"
    TIME = "time"
    YEAR = "year"
    TEXT = "text"
    BINARY = "binary"
    ENUM = "enum"
    SET = "set"
    BOOLEAN = "boolean"
    JSON = "json"

    @classmethod
    def from_type_name(
        cls, type_name: str, column: str | None = None, table: str | None = None
    ) -> "ColumnType":
        """
        Resolve a catalog type name such as ``int unsigned`` or ``VARCHAR``.

        Args:
            type_name: Data type name as reported by the catalog
            column: Column name, used in the error message only
            table: Table name, used in the error message only

        Returns:
            ColumnType member for the name

        Raises:
            UnsupportedTypeError: If the name is outside the enumerated set
        """
        normalized = normalize_type_name(type_name)
        try:
            return _TYPE_NAMES[normalized]
        except KeyError:
            raise UnsupportedTypeError(normalized or type_name, column, table) from None


def normalize_type_name(type_name: str) -> str:
    """Upper-case a type name and drop ``UNSIGNED`` and all whitespace."""
    normalized = type_name.upper().replace("UNSIGNED", "")
    return "".join(normalized.split())


_TYPE_NAMES: dict[str, ColumnType] = {
    **dict.fromkeys(
        ("TINYINT", "SMALLINT", "MEDIUMINT", "INT", "INTEGER", "BIGINT"),
        ColumnType.INTEGER,
    ),
    **dict.fromkeys(("FLOAT", "DOUBLE", "REAL"), ColumnType.FLOAT),
    **dict.fromkeys(("DECIMAL", "DEC", "NUMERIC"), ColumnType.DECIMAL),
    "DATE": ColumnType.DATE,
    "DATETIME": ColumnType.DATETIME,
    "TIMESTAMP": ColumnType.TIMESTAMP,
    "TIME": ColumnType.TIME,
    "YEAR": ColumnType.YEAR,
    **dict.fromkeys(
        ("CHAR", "VARCHAR", "TINYTEXT", "TEXT", "MEDIUMTEXT", "LONGTEXT"),
        ColumnType.TEXT,
    ),
    **dict.fromkeys(
        ("BIT", "BINARY", "VARBINARY", "TINYBLOB", "BLOB", "MEDIUMBLOB", "LONGBLOB"),
        ColumnType.BINARY,
    ),
    "ENUM": ColumnType.ENUM,
    "SET": ColumnType.SET,
    **dict.fromkeys(("BOOL", "BOOLEAN"), ColumnType.BOOLEAN),
    "JSON": ColumnType.JSON,
}
