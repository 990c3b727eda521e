"""
Unit tests for mysqldump/utils/sql_safety.py
"""

import pytest

from mysqldump.errors import ConfigurationError
from mysqldump.utils.sql_safety import quote_identifier, validate_integer_param


class TestQuoteIdentifier:
    """Test identifier quoting"""

    def test_plain_name(self):
        assert quote_identifier("orders") == "`orders`"

    def test_embedded_backtick_doubled(self):
        """Test that a backtick cannot close the quoted identifier"""
        assert quote_identifier("evil`; DROP TABLE x; --") == "`evil``; DROP TABLE x; --`"

    def test_spaces_and_unicode_kept(self):
        assert quote_identifier("order items") == "`order items`"
        assert quote_identifier("commandes_été") == "`commandes_été`"

    def test_empty_rejected(self):
        with pytest.raises(ValueError, match="cannot be empty"):
            quote_identifier("")


class TestValidateIntegerParam:
    """Test integer option validation"""

    def test_valid(self):
        validate_integer_param(0, "merge_size")
        validate_integer_param(10, "rows_per_insert", min_value=1)

    @pytest.mark.parametrize("value", ["5", 2.0, None, False])
    def test_not_an_integer(self, value):
        with pytest.raises(ConfigurationError, match="Must be an integer"):
            validate_integer_param(value, "merge_size")

    def test_below_minimum(self):
        with pytest.raises(ConfigurationError, match="Must be >= 1"):
            validate_integer_param(0, "max_lifetime", min_value=1)

    def test_no_minimum(self):
        validate_integer_param(-3, "merge_size", min_value=None)
