"""
=========================================
Pytest suite for core.config and options
=========================================

Sections:
---------
1. Unit tests - Config loading and properties
2. Unit tests - parse_options
3. Edge case tests - Unknown option keys, bad input types

Available markers:
------------------
unit, edge_case

How to Execute:
---------------
All tests:          pytest tests/tests_core/test_config.py -v
By category:        pytest tests/tests_core/test_config.py -m unit
With coverage:      pytest tests/tests_core/test_config.py --cov=core
"""

from dataclasses import dataclass

import pytest

from core.config import BuilderConfig, Config, config
from core.options import UnknownOptionError, parse_options


@dataclass
class SampleOptions:
    limit: int = -1
    select_max: bool = False
    where: dict = None


# ====================
# Config
# ====================

@pytest.mark.unit
def test_config_defaults(builder_defaults):
    """Test defaults pinned by the autouse fixture are exposed through properties."""
    assert config.mysql_version == '5.5'
    assert config.engine == 'InnoDB'
    assert config.charset == 'utf8mb4'
    assert config.schema_name is None
    assert config.log_level == 'INFO'


@pytest.mark.unit
def test_config_reload_reads_environment(monkeypatch):
    """Test reload() picks up changed environment variables."""
    monkeypatch.setenv('MYSQL_VERSION', '8.0')
    monkeypatch.setenv('MYSQL_SCHEMA', ' shop ')
    config.reload()

    assert config.mysql_version == '8.0'
    assert config.schema_name == 'shop'


@pytest.mark.unit
def test_config_builds_dataclass():
    """Test a fresh Config holds a BuilderConfig."""
    fresh = Config()
    assert isinstance(fresh.builder, BuilderConfig)
    assert fresh.engine == 'InnoDB'


@pytest.mark.edge_case
def test_config_blank_schema_is_none(monkeypatch):
    """Test a whitespace-only MYSQL_SCHEMA means no schema."""
    monkeypatch.setenv('MYSQL_SCHEMA', '   ')
    config.reload()
    assert config.schema_name is None


# ====================
# parse_options
# ====================

@pytest.mark.unit
def test_parse_options_none_gives_defaults():
    """Test None builds the default dataclass."""
    assert parse_options(SampleOptions, None) == SampleOptions()


@pytest.mark.unit
def test_parse_options_instance_passthrough():
    """Test an instance is returned unchanged."""
    opts = SampleOptions(limit=3)
    assert parse_options(SampleOptions, opts) is opts


@pytest.mark.unit
def test_parse_options_hyphenated_keys():
    """Test hyphenated keys map onto underscore fields."""
    opts = parse_options(SampleOptions, {'select-max': True, 'limit': 5})
    assert opts.select_max is True
    assert opts.limit == 5


@pytest.mark.unit
def test_parse_options_aliases():
    """Test legacy aliases are translated before lookup."""
    opts = parse_options(SampleOptions, {'condition-cols-and-vals': {'a': 1}},
                         aliases={'condition-cols-and-vals': 'where'})
    assert opts.where == {'a': 1}


@pytest.mark.edge_case
def test_parse_options_unknown_key_raises():
    """Test unknown keys are rejected instead of ignored."""
    with pytest.raises(UnknownOptionError, match="limt"):
        parse_options(SampleOptions, {'limt': 10})


@pytest.mark.edge_case
def test_parse_options_rejects_non_mapping():
    """Test a non-mapping argument raises TypeError."""
    with pytest.raises(TypeError):
        parse_options(SampleOptions, ['limit', 10])


@pytest.mark.edge_case
def test_unknown_option_error_is_value_error():
    """Test UnknownOptionError can be caught as ValueError."""
    assert issubclass(UnknownOptionError, ValueError)
