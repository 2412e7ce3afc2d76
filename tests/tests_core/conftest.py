"""
Shared fixtures for core/ module tests.

Key fixtures:
- clean_root_logger: restores root logger handlers and level after a test
"""

import logging

import pytest


@pytest.fixture
def clean_root_logger():
    """Snapshot the root logger and restore it after the test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
