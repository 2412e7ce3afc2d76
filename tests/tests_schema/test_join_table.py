"""
=================================
Pytest suite for schema.join_table
=================================

Sections:
---------
1. Unit tests - Factory naming
2. Unit tests - Column merge and collision renaming
3. Unit tests - Join condition
4. Edge case tests - Skipped pairs, bad join types, bad sources

Available markers:
------------------
unit, edge_case, regression

How to Execute:
---------------
All tests:          pytest tests/tests_schema/test_join_table.py -v
By category:        pytest tests/tests_schema/test_join_table.py -m unit
With coverage:      pytest tests/tests_schema/test_join_table.py --cov=schema.join_table
"""

from types import SimpleNamespace

import pytest

from schema.column import Column
from schema.join_table import JoinTable, JoinTableFactory, resolve_table
from schema.results import FailureReason
from schema.table import Table

# ====================
# Factory
# ====================

@pytest.mark.unit
def test_factory_names_unnamed_joins(articles_table, users_table):
    """Test unnamed joins are called T0, T1, ... per factory."""
    factory = JoinTableFactory()
    assert factory.create(articles_table, users_table).name == 'T0'
    assert factory.create(articles_table, users_table).name == 'T1'
    assert factory.count == 2

    factory.reset()
    assert factory.create(articles_table, users_table).name == 'T0'


@pytest.mark.unit
def test_factories_do_not_share_counters(articles_table, users_table):
    """Test two factories count independently."""
    first, second = JoinTableFactory(), JoinTableFactory()
    first.create(articles_table, users_table)
    assert second.create(articles_table, users_table).name == 'T0'


@pytest.mark.unit
def test_explicit_and_invalid_names(articles_table, users_table):
    """Test explicit names are kept and invalid ones replaced by T<n>."""
    factory = JoinTableFactory()
    assert factory.create(articles_table, users_table, name='author_content').name == 'author_content'
    assert factory.create(articles_table, users_table, name='bad name').name == 'T1'


@pytest.mark.regression
def test_join_name_never_schema_qualified(monkeypatch, builder_defaults, articles_table, users_table):
    """Test a configured schema does not qualify the derived table alias."""
    monkeypatch.setenv('MYSQL_SCHEMA', 'shop')
    builder_defaults.reload()
    joined = JoinTable(articles_table, users_table)
    assert joined.get_name() == 'T0'


# ====================
# Column merge
# ====================

@pytest.mark.unit
def test_merge_without_collisions(articles_table, users_table):
    """Test distinct names pass through under their original keys."""
    joined = JoinTable(articles_table, users_table)

    assert not joined.has_collisions
    assert len(joined) == len(articles_table) + len(users_table)
    for key in articles_table.column_keys() + users_table.column_keys():
        assert joined.has_column(key)
    assert joined.get_origin('author-id') == ('left', 'author-id')
    assert joined.get_origin('email') == ('right', 'email')


@pytest.mark.unit
def test_merge_renames_colliding_columns(users_table, profiles_table):
    """Test shared SQL names become left_/right_ and keys get left-/right-."""
    joined = JoinTable(users_table, profiles_table)
    names = joined.column_names()

    assert 'left_user_id' in names
    assert 'right_user_id' in names
    assert 'user_id' not in names
    assert len(joined) == len(users_table) + len(profiles_table)
    assert joined.common_names == ['user_id']
    assert joined.get_column('left-user-id').name == 'left_user_id'
    assert joined.get_column('right-user-id').name == 'right_user_id'
    assert joined.get_origin('right-user-id') == ('right', 'user-id')
    assert joined.get_origin('bio') == ('right', 'bio')


@pytest.mark.regression
def test_merge_does_not_touch_sources(users_table, profiles_table):
    """Test source columns keep their names, indices and owners."""
    user_id = users_table.get_column('user-id')
    JoinTable(users_table, profiles_table)

    assert user_id.name == 'user_id'
    assert user_id.owner is users_table
    assert user_id.index == 0
    assert profiles_table.get_column('user-id').name == 'user_id'


@pytest.mark.unit
def test_merged_columns_are_copies(users_table, profiles_table):
    """Test merged columns keep type and flags but belong to the join."""
    joined = JoinTable(users_table, profiles_table)
    merged = joined.get_column('left-user-id')
    source = joined.get_source_column('left-user-id')

    assert merged is not source
    assert source is users_table.get_column('user-id')
    assert merged.type == 'int'
    assert merged.is_primary
    assert merged.owner is joined


@pytest.mark.edge_case
def test_key_only_collision_prefixes_keys():
    """Test a shared key with distinct SQL names only prefixes the keys."""
    left, right = Table('a'), Table('b')
    left.add_column('name', Column('a_name'))
    right.add_column('name', Column('b_name'))

    joined = JoinTable(left, right)
    assert joined.column_keys() == ['left-name', 'right-name']
    assert joined.column_names() == ['a_name', 'b_name']
    assert not joined.has_collisions


@pytest.mark.regression
def test_renamed_column_never_shadows_existing_one():
    """Test a prefixed name already used on its own side gets a numeric suffix."""
    left, right = Table('a'), Table('b')
    left.add_column('id', Column('id', 'int'))
    left.add_column('left-id', Column('left_id', 'int'))
    right.add_column('id', Column('id', 'int'))

    joined = JoinTable(left, right)
    assert len(joined) == 3
    assert joined.column_keys() == ['left-id-2', 'left-id', 'right-id']
    assert joined.column_names() == ['left_id_2', 'left_id', 'right_id']
    assert joined.get_origin('left-id-2') == ('left', 'id')
    assert joined.get_origin('left-id') == ('left', 'left-id')
    assert joined.get_origin('right-id') == ('right', 'id')


# ====================
# Join condition
# ====================

@pytest.mark.unit
def test_join_condition_single_pair(articles_table, users_table):
    """Test one pair builds 'on left.col = right.col'."""
    joined = JoinTable(articles_table, users_table)
    result = joined.set_join_condition({'author-id': 'user-id'})

    assert result
    assert result.condition == 'on articles.author_id = system_users.user_id'
    assert joined.join_condition == result.condition
    assert result.applied == [('author-id', 'user-id')]
    assert result.skipped == []


@pytest.mark.unit
def test_join_condition_operators(users_table, profiles_table):
    """Test comparators and join operators are applied per pair."""
    joined = JoinTable(users_table, profiles_table)
    result = joined.set_join_condition(
        [('user-id', 'user-id'), ('user-id', 'profile-id')],
        comparators=['=', '!='],
        join_operators=['OR'],
    )
    assert result.condition == (
        'on system_users.user_id = profiles.user_id or system_users.user_id != profiles.profile_id'
    )


@pytest.mark.edge_case
def test_join_condition_invalid_operators_fall_back(users_table, profiles_table):
    """Test unknown comparators become '=' and unknown join operators 'and'."""
    joined = JoinTable(users_table, profiles_table)
    result = joined.set_join_condition(
        [('user-id', 'user-id'), ('user-id', 'profile-id')],
        comparators=['like', '<>'],
        join_operators=['xor'],
    )
    assert result.condition == (
        'on system_users.user_id = profiles.user_id and system_users.user_id = profiles.profile_id'
    )


@pytest.mark.edge_case
def test_join_condition_reports_skipped_pairs(articles_table, users_table, caplog):
    """Test missing columns and type mismatches are skipped and reported."""
    joined = JoinTable(articles_table, users_table)
    result = joined.set_join_condition({
        'title': 'user-id',
        'nope': 'user-id',
        'author-id': 'user-id',
    })

    assert result.condition == 'on articles.author_id = system_users.user_id'
    assert result.skipped == [
        ('title', 'user-id', FailureReason.TYPE_MISMATCH),
        ('nope', 'user-id', FailureReason.NO_SUCH_COLUMN),
    ]
    assert caplog.text.count('skipped pair') == 2


@pytest.mark.edge_case
def test_join_condition_all_skipped(articles_table, users_table):
    """Test a condition with no usable pair is empty and falsy."""
    joined = JoinTable(articles_table, users_table)
    result = joined.set_join_condition({'title': 'user-id'})
    assert not result
    assert joined.join_condition == ''


@pytest.mark.unit
def test_join_condition_replaced_on_second_call(articles_table, users_table):
    """Test calling set_join_condition again replaces the clause."""
    joined = JoinTable(articles_table, users_table)
    joined.set_join_condition({'author-id': 'user-id'})
    joined.set_join_condition({'article-id': 'user-id'})
    assert joined.join_condition == 'on articles.article_id = system_users.user_id'


# ====================
# Join type and sources
# ====================

@pytest.mark.unit
@pytest.mark.parametrize("join_type, expected", [
    ('left', 'left'),
    ('INNER', 'inner'),
    ('right', 'right'),
    ('cross', 'cross'),
    ('outer', 'left'),
])
def test_join_type(articles_table, users_table, join_type, expected):
    """Test supported join types are kept and others fall back to left."""
    assert JoinTable(articles_table, users_table, join_type=join_type).join_type == expected


@pytest.mark.unit
def test_resolve_table_from_builder_like_object(users_table):
    """Test objects exposing get_linked_table() are accepted."""
    builder = SimpleNamespace(get_linked_table=lambda: users_table)
    assert resolve_table(builder) is users_table


@pytest.mark.edge_case
@pytest.mark.parametrize("source", ['system_users', None, SimpleNamespace(get_linked_table=lambda: None)])
def test_resolve_table_rejects_other_objects(source):
    """Test anything that does not yield a Table raises TypeError."""
    with pytest.raises(TypeError):
        resolve_table(source)
