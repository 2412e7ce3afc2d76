"""
Shared fixtures for sql/ module tests.

Key fixtures:
- people_table: users table with id, name, age, price, active, joined_on, avatar
- people_query: TableQuery over people_table
- authors_tables: (articles, system_users) pair used for join tests
"""

import pytest

from schema.column import Column
from schema.table import Table
from sql.query_builder import TableQuery


@pytest.fixture
def people_table():
    """Users table covering every literal formatting rule."""
    table = Table('users')
    user_id = Column('id', 'int', 11)
    user_id.set_primary(True)
    user_id.set_auto_increment(True)
    table.add_column('id', user_id)
    table.add_column('name', Column('name', 'varchar', 64))
    table.add_column('age', Column('age', 'int', 3))
    table.add_column('price', Column('price', 'decimal'))
    table.add_column('active', Column('active', 'boolean'))
    table.add_column('joined-on', Column('joined_on', 'datetime'))
    table.add_column('avatar', Column('avatar', 'blob'))
    return table


@pytest.fixture
def people_query(people_table):
    """Builder over the users table."""
    return TableQuery(people_table)


@pytest.fixture
def authors_tables():
    """Articles and users tables joined on author_id = user_id."""
    users = Table('system_users')
    user_id = Column('user_id', 'int', 11)
    user_id.set_primary(True)
    users.add_column('user-id', user_id)
    users.add_column('username', Column('username', 'varchar', 30))

    articles = Table('articles')
    article_id = Column('article_id', 'int', 11)
    article_id.set_primary(True)
    articles.add_column('article-id', article_id)
    articles.add_column('author-id', Column('author_id', 'int', 11))
    articles.add_column('content', Column('content', 'text'))
    return articles, users
