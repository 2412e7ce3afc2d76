"""
===================================
Pytest suite for schema.column
===================================

Sections:
---------
1. Unit tests - Construction, type normalization, setters
2. Unit tests - Column definitions
3. Edge case tests - Invalid names, sizes, defaults

Available markers:
------------------
unit, edge_case, regression

How to Execute:
---------------
All tests:          pytest tests/tests_schema/test_column.py -v
By category:        pytest tests/tests_schema/test_column.py -m unit
With coverage:      pytest tests/tests_schema/test_column.py --cov=schema.column
"""

import gc

import pytest

from schema.column import CURRENT_TIMESTAMP, Column
from schema.results import FailureReason
from schema.table import Table

# ====================
# Construction
# ====================

@pytest.mark.unit
def test_column_defaults():
    """Test a bare Column is varchar(1) named 'col'."""
    col = Column()
    assert col.name == 'col'
    assert col.type == 'varchar'
    assert col.size == 1
    assert col.index == -1
    assert col.owner is None
    assert not col.is_nullable


@pytest.mark.unit
@pytest.mark.parametrize("col_type, expected_type, expected_size", [
    ('int', 'int', 11),
    ('INTEGER', 'int', 11),
    ('bool', 'boolean', None),
    ('Text', 'text', None),
    ('decimal', 'decimal', 10),
    ('timestamp', 'timestamp', None),
    ('longblob', 'longblob', None),
])
def test_column_type_normalization(col_type, expected_type, expected_size):
    """Test types are lowercased, aliased and given their default size."""
    col = Column('c', col_type)
    assert col.type == expected_type
    assert col.size == expected_size


@pytest.mark.unit
def test_column_unknown_type_falls_back(caplog):
    """Test an unknown type becomes varchar(1) and logs a warning."""
    col = Column('c', 'geometry', 40)
    assert col.type == 'varchar'
    assert col.size == 1
    assert "Unsupported column type 'geometry'" in caplog.text


@pytest.mark.unit
def test_column_size_in_constructor():
    """Test a valid size is applied."""
    assert Column('name', 'varchar', 64).size == 64


@pytest.mark.edge_case
@pytest.mark.parametrize("col_type, size, expected", [
    ('int', 12, 11),
    ('int', 0, 11),
    ('varchar', 21846, 1),
    ('decimal', 66, 10),
])
def test_column_size_out_of_range_uses_default(col_type, size, expected):
    """Test out-of-range sizes leave the type default."""
    assert Column('c', col_type, size).size == expected


@pytest.mark.edge_case
def test_column_invalid_name_keeps_default():
    """Test an invalid constructor name leaves 'col'."""
    assert Column('user name').name == 'col'


# ====================
# Setters
# ====================

@pytest.mark.unit
def test_set_name_trims_and_validates():
    """Test set_name trims spaces and rejects bad identifiers."""
    col = Column('a')
    assert col.set_name('  first_name ')
    assert col.name == 'first_name'

    result = col.set_name('first-name')
    assert not result
    assert result.reason is FailureReason.INVALID_IDENTIFIER
    assert col.name == 'first_name'


@pytest.mark.unit
def test_set_size_on_unsized_type_fails():
    """Test sizes are refused for types without a size."""
    result = Column('c', 'text').set_size(10)
    assert result.reason is FailureReason.TYPE_MISMATCH


@pytest.mark.unit
def test_decimal_scale():
    """Test decimal scale defaults to 2 and is bounded by the size."""
    col = Column('price', 'decimal', 8)
    assert col.scale == 2
    assert col.set_scale(4)
    assert not col.set_scale(9)
    assert col.set_size(3)
    assert col.scale == 3


@pytest.mark.unit
def test_primary_forces_not_null():
    """Test primary columns cannot be nullable."""
    col = Column('id', 'int')
    col.set_nullable(True)
    col.set_primary(True)
    assert not col.is_nullable
    assert not col.set_nullable(True)


@pytest.mark.unit
def test_auto_increment_rules():
    """Test auto increment needs an int primary column."""
    col = Column('id', 'int')
    assert col.set_auto_increment(True).reason is FailureReason.INVALID_VALUE
    col.set_primary(True)
    assert col.set_auto_increment(True)
    assert col.is_auto_increment

    col.set_primary(False)
    assert not col.is_auto_increment

    text_col = Column('t', 'varchar')
    text_col.set_primary(True)
    assert text_col.set_auto_increment(True).reason is FailureReason.TYPE_MISMATCH


@pytest.mark.unit
def test_set_default_temporal_uses_current_timestamp():
    """Test set_default() without a value on a timestamp means now."""
    col = Column('created_on', 'timestamp')
    assert col.set_default()
    assert col.default == CURRENT_TIMESTAMP


@pytest.mark.edge_case
@pytest.mark.parametrize("col_type, value, ok", [
    ('int', 5, True),
    ('int', '5', False),
    ('int', True, False),
    ('boolean', False, True),
    ('decimal', 2.5, True),
    ('varchar', 'x', True),
    ('varchar', 3, False),
    ('blob', 'x', False),
])
def test_set_default_type_checks(col_type, value, ok):
    """Test defaults must match the column type."""
    assert bool(Column('c', col_type).set_default(value)) is ok


@pytest.mark.unit
def test_auto_update_only_temporal():
    """Test auto_update is limited to datetime/timestamp."""
    assert Column('d', 'datetime').auto_update()
    assert not Column('n', 'int').auto_update()


# ====================
# Definitions
# ====================

@pytest.mark.unit
def test_definition_unique_varchar():
    """Test the definition of an unattached unique varchar."""
    col = Column('user_name', 'varchar', 50)
    col.set_unique(True)
    assert str(col) == 'user_name varchar(50) not null unique'


@pytest.mark.unit
def test_definition_decimal_with_default():
    """Test decimal definitions carry precision, scale and a quoted default."""
    col = Column('price', 'decimal')
    col.set_default(9.5)
    assert col.get_definition() == "price decimal(10,2) not null default '9.5'"


@pytest.mark.unit
def test_definition_datetime_auto_update():
    """Test datetime columns render 'on update current_timestamp'."""
    col = Column('last_updated', 'datetime')
    col.set_nullable(True)
    col.auto_update()
    assert col.get_definition() == 'last_updated datetime null on update current_timestamp'


@pytest.mark.unit
def test_definition_auto_increment_only_on_request():
    """Test auto_increment appears only when explicitly requested."""
    col = Column('id', 'int')
    col.set_primary(True)
    col.set_auto_increment(True)
    assert col.get_definition() == 'id int(11) not null'
    assert col.get_definition(include_auto_increment=True) == 'id int(11) not null auto_increment'


@pytest.mark.unit
def test_definition_text_collation_and_comment():
    """Test attached text columns carry the table collation and escaped comments."""
    table = Table('notes', mysql_version='8.0')
    col = Column('body', 'text')
    col.set_comment("Author's note")
    table.add_column('body', col)
    assert col.get_definition() == (
        "body text not null collate utf8mb4_unicode_520_ci comment 'Author\\'s note'"
    )


@pytest.mark.regression
def test_owner_is_weak_reference():
    """Test a column does not keep its table alive."""
    table = Table('temp')
    col = Column('a', 'int')
    table.add_column('a', col)
    assert col.owner is table

    del table
    gc.collect()
    assert col.owner is None
