"""
Shared fixtures for schema/ module tests.

Key fixtures:
- users_table: system_users with user-id, username, email
- articles_table: articles with article-id, author-id, title, content
- profiles_table: profiles sharing the user_id column name with users_table
"""

import pytest

from schema.column import Column
from schema.table import Table


@pytest.fixture
def users_table():
    """Users table keyed like an application would key it."""
    table = Table('system_users')
    user_id = Column('user_id', 'int', 11)
    user_id.set_primary(True)
    user_id.set_auto_increment(True)
    table.add_column('user-id', user_id)
    table.add_column('username', Column('username', 'varchar', 30))
    table.add_column('email', Column('email', 'varchar', 128))
    return table


@pytest.fixture
def articles_table():
    """Articles table whose author_id refers to users."""
    table = Table('articles')
    article_id = Column('article_id', 'int', 11)
    article_id.set_primary(True)
    table.add_column('article-id', article_id)
    table.add_column('author-id', Column('author_id', 'int', 11))
    table.add_column('title', Column('title', 'varchar', 150))
    table.add_column('content', Column('content', 'text'))
    return table


@pytest.fixture
def profiles_table():
    """Profiles table with a user_id column colliding with users_table."""
    table = Table('profiles')
    table.add_column('profile-id', Column('profile_id', 'int', 11))
    table.add_column('user-id', Column('user_id', 'int', 11))
    table.add_column('bio', Column('bio', 'text'))
    return table
