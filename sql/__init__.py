"""
====================================================
SQL text package for the MySQL statement builder.
====================================================

This package turns the in-memory model of the schema package into MySQL
statements. Nothing here opens a connection: the text (or the SQLAlchemy
TextClause from QueryBuilder.to_text()) is handed to an external executor.

The package follows a clear organization:
    - literals.py: Type-aware value formatting and escaping
    - conditions.py: WHERE / ORDER BY / GROUP BY clauses and date conditions
    - options.py: Option dataclasses for select, select_count, default columns
    - ddl.py: Create table, primary/foreign key, alter, view, show statements
    - dml.py: Insert, update, delete statements
    - common_queries.py: information_schema metadata queries
    - query_builder.py: QueryBuilder, TableQuery and JoinQuery

Architecture:
    - ddl/dml/common_queries are pure functions returning text
    - query_builder.py imports the others (not vice versa)
    - Builders record query text, type tag and blob flag after every call

Example:
    >>> from schema import Column, Table
    >>> from sql import TableQuery
    >>>
    >>> users = Table('users')
    >>> users.add_column('name', Column('name', 'varchar', 64))
    >>> query = TableQuery(users)
    >>> query.insert_record({'name': 'Alice'})
    >>> query.query
    "insert into users (name) values ('Alice');"
"""

__version__ = "0.1.0"
__all__ = [
    # Builders
    'QueryBuilder', 'TableQuery', 'JoinQuery',
    'QueryBuilderError', 'UnsupportedQueryTypeError', 'QUERY_TYPES',
    # Options
    'SelectOptions', 'SelectCountOptions', 'UnknownOptionError',
    # Clauses and literals
    'create_where_conditions', 'build_where_clause', 'create_date_condition', 'DateValue',
    'escape_mysql_special_chars', 'format_value', 'FormattedValue',
]

from .conditions import DateValue, build_where_clause, create_date_condition, create_where_conditions
from .literals import FormattedValue, escape_mysql_special_chars, format_value
from .options import SelectCountOptions, SelectOptions, UnknownOptionError
from .query_builder import (
    QUERY_TYPES,
    JoinQuery,
    QueryBuilder,
    QueryBuilderError,
    TableQuery,
    UnsupportedQueryTypeError,
)
