"""
Pytest configuration and fixtures for mysqldump-py tests.
Provides shared fixtures for mocked connections and test setup.
"""

import os
from pathlib import Path
from unittest.mock import MagicMock

import pytest


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Get project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture(autouse=True)
def clear_mysql_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep MYSQL_* variables of the host environment out of tests."""
    for key in list(os.environ):
        if key.startswith("MYSQL_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def mock_cursor() -> MagicMock:
    """DB-API cursor that returns no rows."""
    cursor = MagicMock()
    cursor.with_rows = False
    cursor.fetchall.return_value = []
    cursor.fetchmany.return_value = []
    cursor.description = None
    return cursor


@pytest.fixture
def mock_connection(mock_cursor: MagicMock) -> MagicMock:
    """Connection handing out ``mock_cursor``."""
    connection = MagicMock()
    connection.cursor.return_value = mock_cursor
    return connection
