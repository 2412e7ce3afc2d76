"""
============================================
Core infrastructure package for the builder.
============================================

This package provides centralized configuration management and logging
infrastructure used throughout the SQL builder.

Modules:
    config: Configuration management from environment variables
    logger: Centralized logging configuration and utilities
    options: Dict-or-dataclass option parsing shared by builders

Example:
    >>> from core.config import config
    >>> from core.logger import get_logger
    >>>
    >>> logger = get_logger(__name__)
    >>> logger.info(f"Default engine is {config.engine}")
"""

__version__ = "0.1.0"
__all__ = [
    'get_logger', 'setup_logging', 'config', 'Config', 'BuilderConfig',
    'parse_options', 'UnknownOptionError'
]

from core.config import BuilderConfig, Config, config
from core.logger import get_logger, setup_logging
from core.options import UnknownOptionError, parse_options
