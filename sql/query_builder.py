"""
============================
MySQL Query Builder classes.
============================

A QueryBuilder turns the table returned by get_linked_table() plus
structured options into one SQL statement. After each build method the
caller reads:

    query              current SQL text
    query_type         select, update, delete, insert, show, create, alter or drop
    is_blob_operation  True when file content was inlined (the executor may
                       need to adjust the connection charset first)

Builders never execute anything. to_text() wraps the query for a SQLAlchemy
connection owned by the caller.

Builders:
- QueryBuilder: abstract base with all statement methods
- TableQuery: builder over a plain Table
- JoinQuery: builder over a JoinTable; selects from the join as a derived table

Usage:
    from schema import Column, Table
    from sql.query_builder import TableQuery

    users = Table('users')
    users.add_default_columns()
    users.add_column('name', Column('name', 'varchar', 64))

    query = TableQuery(users)
    query.select({'where': {'name': "O'Brien"}, 'limit': 10})
    query.query       # "select * from users where name = 'O\\'Brien' limit 10;"
    query.query_type  # 'select'
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from sqlalchemy import text
from sqlalchemy.sql.elements import TextClause

from schema.column import Column
from schema.foreign_key import ForeignKey
from schema.join_table import JoinTable, JoinTableFactory
from schema.results import FailureReason, Result, is_valid_identifier
from schema.table import Table
from sql.common_queries import (
    schema_tables_count_sql,
    schema_tables_sql,
    schema_views_count_sql,
    schema_views_sql,
)
from sql.conditions import (
    build_group_by,
    build_order_by,
    build_where_clause,
    resolve_column,
    split_conditions,
)
from sql.ddl import (
    alter_statement,
    create_structure_statement,
    create_view_statement,
    foreign_key_statement,
    primary_key_statements,
    show_statement,
)
from sql.dml import delete_statement, insert_statement, update_blob_statement, update_statement
from sql.literals import NULL, format_value, read_blob_literal
from sql.options import SelectCountOptions, SelectOptions

logger = logging.getLogger(__name__)

QUERY_TYPES = ('select', 'update', 'delete', 'insert', 'show', 'create', 'alter', 'drop')


class QueryBuilderError(Exception):
    """Base exception for errors raised by query builders."""
    pass


class UnsupportedQueryTypeError(QueryBuilderError):
    """Exception raised when a query is recorded with an unknown type."""
    pass


def _value_pairs(table: Table, values) -> List[Tuple[Optional[Column], Any]]:
    """Resolve {key|index|Column: value} or {value: Column} into (column, value)."""
    items = values.items() if isinstance(values, Mapping) else values
    pairs = []
    for key, value in items:
        if isinstance(value, Column):
            pairs.append((value, key))
        else:
            pairs.append((resolve_column(table, key), value))
    return pairs


class QueryBuilder(ABC):
    """Base class of all builders.

    Subclasses provide the table through get_linked_table(). Methods that
    can fail on caller input return a Result and leave the current query
    untouched on failure.

    Attributes:
        query: Current SQL text
        query_type: Type tag of the current query
        is_blob_operation: Whether the current query inlines file content
        schema_name: Optional schema used to qualify alter statements
    """

    def __init__(self, join_factory: Optional[JoinTableFactory] = None):
        self._query = ''
        self._query_type = 'select'
        self._is_blob_operation = False
        self._schema_name: Optional[str] = None
        self._join_factory = join_factory or JoinTableFactory()

    def __str__(self):
        return self._query

    @abstractmethod
    def get_linked_table(self) -> Optional[Table]:
        """Return the table this builder works on."""
        pass

    # ------------------------------------------------------------------
    # Query state
    # ------------------------------------------------------------------

    @property
    def query(self) -> str:
        return self._query

    @property
    def query_type(self) -> str:
        return self._query_type

    @property
    def is_blob_operation(self) -> bool:
        return self._is_blob_operation

    def set_is_blob_operation(self, flag: bool) -> None:
        self._is_blob_operation = flag is True

    @property
    def join_factory(self) -> JoinTableFactory:
        return self._join_factory

    @property
    def schema_name(self) -> Optional[str]:
        return self._schema_name

    def set_schema_name(self, name: str) -> Result:
        trimmed = name.strip() if isinstance(name, str) else name
        if not is_valid_identifier(trimmed):
            return Result.failure(FailureReason.INVALID_IDENTIFIER, f"Invalid schema name: {name!r}")
        self._schema_name = trimmed
        return Result.success()

    def set_query(self, query: str, query_type: str, blob_operation: bool = False) -> None:
        """Record a query and its type.

        Args:
            query: SQL text
            query_type: One of select, update, delete, insert, show, create,
                alter, drop (any case)
            blob_operation: Whether the query inlines file content

        Raises:
            UnsupportedQueryTypeError: If query_type is not a known type
        """
        lowered = query_type.strip().lower() if isinstance(query_type, str) else query_type
        if lowered not in QUERY_TYPES:
            raise UnsupportedQueryTypeError(f"Unsupported query type: '{query_type}'")
        self._query = query
        self._query_type = lowered
        self._is_blob_operation = blob_operation is True
        logger.debug(f"Built {lowered} query: {query}")

    def to_text(self) -> TextClause:
        """Return the current query as a SQLAlchemy TextClause.

        Every colon is escaped. The query holds no bind parameters, and text()
        turns each '\\:' back into ':' when compiled, so values such as
        '10:30:00' or 'a\\:b' come out as written.
        """
        return text(self._query.replace(':', '\\:'))

    # ------------------------------------------------------------------
    # Table access
    # ------------------------------------------------------------------

    def get_structure_name(self) -> Optional[str]:
        table = self.get_linked_table()
        return table.get_name() if table is not None else None

    def get_column(self, key: Union[str, int]) -> Optional[Column]:
        table = self.get_linked_table()
        return resolve_column(table, key) if table is not None else None

    def get_column_name(self, key: Union[str, int]) -> Optional[str]:
        col = self.get_column(key)
        return col.name if col is not None else None

    def get_column_index(self, key: str) -> int:
        col = self.get_column(key)
        return col.index if col is not None else -1

    def _qualifier(self) -> Optional[str]:
        """Alias put in front of column names in select clauses."""
        return None

    def _from_source(self, table: Table) -> str:
        return table.get_name()

    def _qualified_name(self, column: Column) -> str:
        qualifier = self._qualifier()
        return f"{qualifier}.{column.name}" if qualifier else column.name

    def _where(self, table: Table, where, comparators, join_operators) -> Tuple[str, Result]:
        """Build the where clause, failing if any entry cannot be applied."""
        columns, values = split_conditions(table, where)
        return build_where_clause(columns, values, comparators, join_operators, self._qualifier())

    # ------------------------------------------------------------------
    # Select
    # ------------------------------------------------------------------

    def select(self, options: Union[SelectOptions, Dict[str, Any], None] = None) -> Result:
        """Build a select statement.

        Clause order: where, group by, order by, limit/offset. Limit is only
        emitted when > 0 and offset only when > 0 as well. A max/min select
        has no limit.

        Args:
            options: SelectOptions or its dict form

        Returns:
            Result; NO_SUCH_COLUMN if max/min or a where entry targets an
            unknown column, LENGTH_MISMATCH / INVALID_VALUE for a where
            clause that cannot be rendered in full

        Raises:
            UnknownOptionError: If the options dict has an unknown key

        Example:
            >>> query.select({'columns': ['name'], 'limit': 10, 'offset': 5})
            >>> query.query
            'select name from users limit 10 offset 5;'
        """
        table = self.get_linked_table()
        if table is None:
            return Result.failure(FailureReason.NO_LINKED_TABLE, "No table linked to the builder")
        opts = SelectOptions.from_dict(options)

        aggregate = None
        if opts.columns:
            names = []
            for key in opts.columns:
                col = resolve_column(table, key)
                if col is not None:
                    names.append(self._qualified_name(col))
            select_part = ', '.join(names) if names else '*'
        elif opts.select_max or opts.select_min:
            aggregate = 'max' if opts.select_max else 'min'
            col = resolve_column(table, opts.column) if opts.column is not None else None
            if col is None:
                return Result.failure(
                    FailureReason.NO_SUCH_COLUMN,
                    f"Cannot select {aggregate} of unknown column {opts.column!r}"
                )
            rename = opts.rename_to.strip() if isinstance(opts.rename_to, str) else ''
            select_part = f"{aggregate}({self._qualified_name(col)})"
            if rename:
                select_part += f" as {rename}"
        else:
            select_part = '*'

        where_clause, where_result = self._where(table, opts.where, opts.conditions, opts.join_operators)
        if not where_result:
            return where_result
        clauses = [
            f"select {select_part} from {self._from_source(table)}",
            where_clause,
            build_group_by(table, opts.group_by, self._qualifier()),
            build_order_by(table, opts.order_by, self._qualifier()),
        ]
        if aggregate is None and opts.limit > 0:
            limit = f"limit {opts.limit}"
            if opts.offset > 0:
                limit += f" offset {opts.offset}"
            clauses.append(limit)
        select_sql = ' '.join(clause for clause in clauses if clause) + ';'

        if opts.as_view:
            view_name = opts.view_name.strip() if isinstance(opts.view_name, str) else opts.view_name
            if not is_valid_identifier(view_name):
                return Result.failure(FailureReason.INVALID_IDENTIFIER, f"Invalid view name: {opts.view_name!r}")
            self.set_query(create_view_statement(view_name, select_sql), 'create')
        else:
            self.set_query(select_sql, 'select')
        return Result.success()

    def select_all(self, limit: int = -1, offset: int = -1) -> Result:
        return self.select(SelectOptions(limit=limit, offset=offset))

    def select_max(self, column: str, rename_to: str = 'max') -> Result:
        """Build 'select max(col) as <rename_to> from ...'."""
        return self.select(SelectOptions(select_max=True, column=column, rename_to=rename_to))

    def select_min(self, column: str, rename_to: str = 'min') -> Result:
        """Build 'select min(col) as <rename_to> from ...'."""
        return self.select(SelectOptions(select_min=True, column=column, rename_to=rename_to))

    def select_count(self, options: Union[SelectCountOptions, Dict[str, Any], None] = None) -> Result:
        """Build 'select count(*) as <alias> from <table> [where ...];'.

        The alias is trimmed and its spaces replaced by underscores; an empty
        alias falls back to 'count'.
        """
        table = self.get_linked_table()
        if table is None:
            return Result.failure(FailureReason.NO_LINKED_TABLE, "No table linked to the builder")
        opts = SelectCountOptions.from_dict(options)

        alias = opts.alias.strip().replace(' ', '_') if isinstance(opts.alias, str) else ''
        where_clause, where_result = self._where(table, opts.where, opts.conditions, opts.join_operators)
        if not where_result:
            return where_result
        clauses = [
            f"select count(*) as {alias or 'count'} from {self._from_source(table)}",
            where_clause,
        ]
        self.set_query(' '.join(clause for clause in clauses if clause) + ';', 'select')
        return Result.success()

    # ------------------------------------------------------------------
    # Insert / update / delete
    # ------------------------------------------------------------------

    def insert_record(self, values) -> Result:
        """Build an insert statement for one row.

        Args:
            values: Mapping (or pairs) of column key, position index or
                Column to value. The reverse form {value: Column} is also
                accepted. Blob columns take a file path.

        Returns:
            Result; NO_SUCH_COLUMN when no entry matches a column

        Example:
            >>> query.insert_record({'name': 'Alice', 'age': 30})
            >>> query.query
            "insert into users (name, age) values ('Alice', 30);"
        """
        table = self.get_linked_table()
        if table is None:
            return Result.failure(FailureReason.NO_LINKED_TABLE, "No table linked to the builder")

        names, literals, blob = [], [], False
        for column, value in _value_pairs(table, values):
            if column is None:
                logger.debug(f"Insert into {table.get_name()}: skipped unknown column for value {value!r}")
                continue
            formatted = format_value(column, value)
            names.append(column.name)
            literals.append(formatted.literal)
            blob = blob or formatted.is_blob
        if not names:
            return Result.failure(FailureReason.NO_SUCH_COLUMN, "No value matches a column of the table")

        self.set_query(insert_statement(table.get_name(), names, literals), 'insert', blob)
        return Result.success()

    def update_record(
        self,
        new_values,
        where=None,
        comparators: Optional[List[str]] = None,
        join_operators: Optional[List[str]] = None
    ) -> Result:
        """Build an update statement.

        Args:
            new_values: Columns and new values, same forms as insert_record()
            where: Filter mapping, same forms as select's where
            comparators: Comparators for the where entries
            join_operators: 'and' / 'or' between where entries

        Returns:
            Result; NO_SUCH_COLUMN when no new value matches a column
        """
        table = self.get_linked_table()
        if table is None:
            return Result.failure(FailureReason.NO_LINKED_TABLE, "No table linked to the builder")

        assignments, blob = [], False
        for column, value in _value_pairs(table, new_values):
            if column is None:
                continue
            formatted = format_value(column, value)
            assignments.append((column.name, formatted.literal))
            blob = blob or formatted.is_blob
        if not assignments:
            return Result.failure(FailureReason.NO_SUCH_COLUMN, "No value matches a column of the table")

        where_clause, where_result = self._where(table, where, comparators, join_operators)
        if not where_result:
            return where_result
        self.set_query(update_statement(table.get_name(), assignments, where_clause), 'update', blob)
        return Result.success()

    def delete_record(
        self,
        where=None,
        comparators: Optional[List[str]] = None,
        join_operators: Optional[List[str]] = None
    ) -> Result:
        """Build 'delete from <table> [where ...];'."""
        table = self.get_linked_table()
        if table is None:
            return Result.failure(FailureReason.NO_LINKED_TABLE, "No table linked to the builder")
        where_clause, where_result = self._where(table, where, comparators, join_operators)
        if not where_result:
            return where_result
        self.set_query(delete_statement(table.get_name(), where_clause), 'delete')
        return Result.success()

    def update_blob_from_file(self, column_paths, id_value: Any, id_column_name: str = 'id') -> Result:
        """Build an update storing file content in blob columns of one row.

        Files are read without a prior existence check; a file that cannot
        be read is stored as null and logged.

        Args:
            column_paths: Mapping of column key (or SQL name) to file path
            id_value: Value identifying the row
            id_column_name: Column (key or SQL name) identifying the row

        Returns:
            Result; INVALID_IDENTIFIER for a bad id column name
        """
        table = self.get_linked_table()
        if table is None:
            return Result.failure(FailureReason.NO_LINKED_TABLE, "No table linked to the builder")

        assignments, blob = [], False
        items = column_paths.items() if isinstance(column_paths, Mapping) else column_paths
        for key, path in items:
            column = resolve_column(table, key) or table.get_column_by_name(key)
            if column is not None:
                name = column.name
            elif is_valid_identifier(key):
                name = key
            else:
                logger.debug(f"Blob update: skipped invalid column {key!r}")
                continue
            literal = read_blob_literal(path)
            if literal is None:
                literal = NULL
            else:
                blob = True
            assignments.append((name, literal))
        if not assignments:
            return Result.failure(FailureReason.NO_SUCH_COLUMN, "No blob column to update")

        id_column = table.get_column(id_column_name) or table.get_column_by_name(id_column_name)
        if id_column is not None:
            id_name, id_literal = id_column.name, format_value(id_column, id_value).literal
        elif is_valid_identifier(id_column_name):
            id_name, id_literal = id_column_name, str(id_value)
        else:
            return Result.failure(FailureReason.INVALID_IDENTIFIER, f"Invalid id column: {id_column_name!r}")

        self.set_query(update_blob_statement(table.get_name(), assignments, id_name, id_literal), 'update', blob)
        return Result.success()

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    def alter(self, operations: Iterable[str]) -> Result:
        """Build 'alter table <name>' followed by the given operations.

        The builder's schema name, when set, qualifies the table name.
        """
        table = self.get_linked_table()
        if table is None:
            return Result.failure(FailureReason.NO_LINKED_TABLE, "No table linked to the builder")
        name = f"{self._schema_name}.{table.name}" if self._schema_name else table.get_name()
        self.set_query(alter_statement(name, list(operations)), 'alter')
        return Result.success()

    def add_primary_key(self, table: Optional[Table] = None) -> Result:
        """Build the primary key statements of a table (linked table by default).

        With no primary column the query becomes '' of type alter.
        """
        table = table if table is not None else self.get_linked_table()
        if not isinstance(table, Table):
            return Result.failure(FailureReason.NOT_A_TABLE, f"Not a table: {table!r}")
        self.set_query(primary_key_statements(table), 'alter')
        return Result.success()

    def add_foreign_key(self, key: ForeignKey) -> Result:
        """Build the alter statement of an attached foreign key."""
        if not isinstance(key, ForeignKey) or key.source_table is None:
            return Result.failure(FailureReason.INVALID_VALUE, "Foreign key is not attached to a table")
        self.set_query(foreign_key_statement(key), 'alter')
        return Result.success()

    def create_structure(self, include_comments: bool = False) -> Result:
        """Build the create table script of the linked table.

        Args:
            include_comments: Add '-- ' lines with column and key counts

        Returns:
            Result; NO_LINKED_TABLE if the builder has no table
        """
        table = self.get_linked_table()
        if not isinstance(table, Table):
            return Result.failure(FailureReason.NO_LINKED_TABLE, "No table linked to the builder")
        self.set_query(create_structure_statement(table, include_comments), 'create')
        return Result.success()

    def show(self, thing: str) -> None:
        self.set_query(show_statement(thing), 'show')

    def show_engines(self) -> None:
        self.show('engines')

    # ------------------------------------------------------------------
    # Schema metadata
    # ------------------------------------------------------------------

    def schema_tables_count(self, schema_name: str) -> None:
        self.set_query(schema_tables_count_sql(schema_name), 'select')

    def get_schema_tables(self, schema_name: str) -> None:
        self.set_query(schema_tables_sql(schema_name), 'select')

    def schema_views_count(self, schema_name: str) -> None:
        self.set_query(schema_views_count_sql(schema_name), 'select')

    def get_schema_views(self, schema_name: str) -> None:
        self.set_query(schema_views_sql(schema_name), 'select')

    # ------------------------------------------------------------------
    # Joins
    # ------------------------------------------------------------------

    def join(
        self,
        other,
        column_pairs,
        comparators: Optional[List[str]] = None,
        join_operators: Optional[List[str]] = None,
        join_type: str = 'left',
        name: Optional[str] = None
    ) -> 'JoinQuery':
        """Join this builder's table with another table or builder.

        Args:
            other: Table or QueryBuilder for the right side
            column_pairs: {left key: right key} pairs for the 'on' clause
            comparators: One comparator per pair, padded with '='
            join_operators: 'and' / 'or' between pairs
            join_type: left, right, inner or cross
            name: Alias of the joined table; T<n> when omitted

        Returns:
            JoinQuery sharing this builder's join factory

        Raises:
            TypeError: If either side does not provide a table
        """
        joined = self._join_factory.create(self, other, name=name, join_type=join_type)
        joined.set_join_condition(column_pairs, comparators, join_operators)
        return JoinQuery(joined, join_factory=self._join_factory)


class TableQuery(QueryBuilder):
    """Builder over a single Table.

    Example:
        >>> query = TableQuery(users)
        >>> query.select_count()
        >>> query.query
        'select count(*) as count from users;'
    """

    def __init__(self, table: Optional[Table] = None, join_factory: Optional[JoinTableFactory] = None):
        super().__init__(join_factory)
        self._table = table

    def get_linked_table(self) -> Optional[Table]:
        return self._table

    def set_table(self, table: Table) -> None:
        self._table = table


class JoinQuery(QueryBuilder):
    """Builder over a JoinTable.

    Selects read from the join as a derived table named after the join
    (T0, T1, ...) and qualify column references with that name. When both
    sides share column names, the inner select lists every column with its
    left_/right_ alias so the derived table has no duplicate names.
    """

    def __init__(self, join_table: JoinTable, join_factory: Optional[JoinTableFactory] = None):
        super().__init__(join_factory)
        self._join_table = join_table

    def get_linked_table(self) -> JoinTable:
        return self._join_table

    def _qualifier(self) -> Optional[str]:
        return self._join_table.name

    def _inner_columns(self) -> str:
        joined = self._join_table
        if not joined.has_collisions:
            return '*'
        names = []
        for key, column in joined.items():
            side, _ = joined.get_origin(key)
            source_table = joined.left_table if side == 'left' else joined.right_table
            source = joined.get_source_column(key)
            item = f"{source_table.get_name()}.{source.name}"
            if column.name != source.name:
                item += f" as {column.name}"
            names.append(item)
        return ', '.join(names)

    def _from_source(self, table: Table) -> str:
        joined = self._join_table
        inner = (
            f"select {self._inner_columns()} from {joined.left_table.get_name()} "
            f"{joined.join_type} join {joined.right_table.get_name()}"
        )
        if joined.join_condition:
            inner += f" {joined.join_condition}"
        return f"({inner}) as {joined.name}"
