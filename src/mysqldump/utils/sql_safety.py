"""
SQL safety utilities for MySQL identifiers and numeric options.

Provides identifier quoting and integer validation for safe construction of
catalog queries and dump statements.
"""

from ..errors import ConfigurationError


def quote_identifier(identifier: str) -> str:
    """
    Quote a MySQL identifier with backticks.

    Embedded backticks are doubled, which is MySQL's escaping rule for quoted
    identifiers; names without backticks render exactly as ```name```.

    Args:
        identifier: Database, table or column name

    Returns:
        Quoted identifier safe for use in SQL

    Raises:
        ValueError: If the identifier is empty
    """
    if not identifier:
        raise ValueError("SQL identifier cannot be empty")
    return "`" + identifier.replace("`", "``") + "`"


def validate_integer_param(value: int, param_name: str, min_value: int | None = 0) -> None:
    """
    Validate an integer option.

    Args:
        value: The value to validate
        param_name: Name of the parameter (for error messages)
        min_value: Minimum allowed value (default 0); None accepts any integer

    Raises:
        ConfigurationError: If the value is not an integer or below minimum
    """
    if not isinstance(value, int) or isinstance(value, bool):
        raise ConfigurationError(
            f"Invalid {param_name}: {value!r}. Must be an integer."
        )

    if min_value is not None and value < min_value:
        raise ConfigurationError(
            f"Invalid {param_name}: {value}. Must be >= {min_value}."
        )
