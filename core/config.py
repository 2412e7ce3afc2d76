"""
=============================================
Configuration management for the SQL builder.
=============================================

Loads builder defaults from environment variables (.env file) and provides
a centralized Config singleton for application-wide access.

The configuration system ensures:
- Single source of truth for server version, engine and charset defaults
- Type conversion and validation of the version string
- Environment-specific overrides without code changes

Example:
    >>> from core.config import config
    >>>
    >>> # Defaults applied to every new Table
    >>> print(f"MySQL {config.mysql_version}, engine {config.engine}")
    >>>
    >>> # Re-read the environment after changing it
    >>> config.reload()
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(dotenv_path=env_path)


@dataclass
class BuilderConfig:
    """Defaults used when constructing tables and queries.

    Attributes:
        mysql_version: MySQL server version string ("major.minor")
        engine: Storage engine for created tables
        charset: Default character set for created tables
        schema_name: Optional default schema (database) name
        log_level: Default logging level name
    """

    mysql_version: str
    engine: str
    charset: str
    schema_name: Optional[str]
    log_level: str


class Config:
    """Centralized configuration manager.

    Provides access to all builder settings loaded from environment
    variables (.env file).

    Attributes:
        builder: BuilderConfig instance with table/query defaults

    Properties:
        mysql_version: Server version string
        engine: Storage engine name
        charset: Character set name
        schema_name: Default schema name or None
        log_level: Logging level name

    Example:
        >>> config = Config()
        >>> print(f"Tables default to {config.engine} / {config.charset}")
    """

    def __init__(self):
        """Initialize configuration from environment variables."""
        self.builder = self._load()

    @staticmethod
    def _load() -> BuilderConfig:
        schema_name = os.getenv('MYSQL_SCHEMA', '').strip()
        return BuilderConfig(
            mysql_version=os.getenv('MYSQL_VERSION', '5.5'),
            engine=os.getenv('MYSQL_ENGINE', 'InnoDB'),
            charset=os.getenv('MYSQL_CHARSET', 'utf8mb4'),
            schema_name=schema_name or None,
            log_level=os.getenv('LOG_LEVEL', 'INFO')
        )

    def reload(self) -> None:
        """Re-read settings from the current environment."""
        self.builder = self._load()

    @property
    def mysql_version(self) -> str:
        """Get MySQL server version string."""
        return self.builder.mysql_version

    @property
    def engine(self) -> str:
        """Get default storage engine."""
        return self.builder.engine

    @property
    def charset(self) -> str:
        """Get default character set."""
        return self.builder.charset

    @property
    def schema_name(self) -> Optional[str]:
        """Get default schema name."""
        return self.builder.schema_name

    @property
    def log_level(self) -> str:
        """Get default logging level."""
        return self.builder.log_level


# Global configuration instance
config = Config()
