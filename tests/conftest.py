"""
Shared pytest configuration and fixtures for all tests.
"""

import sys
from pathlib import Path

import pytest

# Add project root to sys.path to enable importing project modules
# This allows tests to import from 'core', 'schema' and 'sql' without installation
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


def pytest_configure(config):
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: Unit tests - isolated function-level tests")
    config.addinivalue_line("markers", "integration: Integration tests - component interactions")
    config.addinivalue_line("markers", "smoke: Smoke tests - basic functionality checks")
    config.addinivalue_line("markers", "edge_case: Edge case tests - boundary conditions")
    config.addinivalue_line("markers", "regression: Regression tests - previously fixed bugs")


@pytest.fixture(autouse=True)
def builder_defaults(monkeypatch):
    """
    Pin the environment-driven defaults so tests do not depend on a local .env.

    MySQL 5.5 (legacy collation), InnoDB, utf8mb4 and no default schema.
    """
    from core.config import config

    monkeypatch.setenv('MYSQL_VERSION', '5.5')
    monkeypatch.setenv('MYSQL_ENGINE', 'InnoDB')
    monkeypatch.setenv('MYSQL_CHARSET', 'utf8mb4')
    monkeypatch.setenv('LOG_LEVEL', 'INFO')
    monkeypatch.delenv('MYSQL_SCHEMA', raising=False)
    config.reload()
    yield config
    monkeypatch.undo()
    config.reload()
