"""
=====================================================================
Data Definition Language (DDL) text for MySQL tables and constraints.
=====================================================================

Pure functions that read the in-memory model (schema package) and return
statement text. They never mutate the model and never talk to a server;
QueryBuilder records their output as the current query.

Functions:
    create_table_statement: 'create table if not exists ...' with storage options
    primary_key_statements: Primary key constraint plus auto_increment modifies
    foreign_key_statement: 'alter table ... add constraint ... foreign key ...'
    create_structure_statement: Table, primary key and foreign keys in one script
    alter_statement: 'alter table <name>' followed by comma separated operations
    create_view_statement: 'create view <name> as (<select>)'
    show_statement: 'show <thing>'

Example:
    >>> from sql.ddl import create_structure_statement
    >>>
    >>> users = Table('users')
    >>> users.add_default_columns()
    >>> print(create_structure_statement(users))
    create table if not exists users (
        id int(11) not null,
        created_on timestamp not null default current_timestamp,
        last_updated datetime null on update current_timestamp
    )
    engine = InnoDB
    default charset = utf8mb4
    collate = utf8mb4_unicode_ci;
    alter table users add constraint users_pk primary key (id);
    alter table users modify id int(11) not null auto_increment;
"""

from typing import List

from schema.foreign_key import ForeignKey
from schema.table import Table
from sql.literals import escape_mysql_special_chars


INDENT = '    '


def create_table_statement(table: Table) -> str:
    """Generate the create table statement for a table.

    Primary keys and foreign keys are not inlined; they are added by the
    alter statements of primary_key_statements() and foreign_key_statement().

    Args:
        table: Table to describe

    Returns:
        SQL text ending with ';'
    """
    column_defs = ",\n".join(f"{INDENT}{col.get_definition()}" for col in table.columns)
    sql = f"create table if not exists {table.get_name()} (\n{column_defs}\n)\n"
    if table.comment:
        sql += f"comment '{escape_mysql_special_chars(table.comment)}'\n"
    sql += (
        f"engine = {table.engine}\n"
        f"default charset = {table.charset}\n"
        f"collate = {table.get_collation()};"
    )
    return sql


def primary_key_statements(table: Table) -> str:
    """Generate the primary key constraint of a table.

    Auto increment can only be declared once the key exists, so each auto
    increment column gets its own 'alter table ... modify' statement after
    the constraint.

    Args:
        table: Table whose primary columns are used

    Returns:
        One or more statements separated by newlines, '' with no primary column
    """
    constraint = table.primary_key_constraint()
    if not constraint:
        return ''
    statements = [f"{constraint};"]
    for col in table.get_primary_key_columns():
        if col.is_auto_increment:
            statements.append(
                f"alter table {table.get_name()} modify {col.get_definition(include_auto_increment=True)};"
            )
    return '\n'.join(statements)


def foreign_key_statement(key: ForeignKey) -> str:
    """Generate the alter statement adding a foreign key.

    Args:
        key: Foreign key attached to its source table

    Returns:
        SQL text, '' if the key is not attached or has no referenced table
    """
    if key.source_table is None or key.referenced_table is None:
        return ''
    source_cols = ', '.join(key.source_columns)
    ref_cols = ', '.join(key.referenced_columns)
    return (
        f"alter table {key.get_source_name()} add constraint {key.key_name} "
        f"foreign key ({source_cols}) references {key.get_referenced_name()}({ref_cols}) "
        f"on delete {key.on_delete} on update {key.on_update};"
    )


def create_structure_statement(table: Table, include_comments: bool = False) -> str:
    """Generate the full script creating a table with its keys.

    Args:
        table: Table to create
        include_comments: Add '-- ' lines describing the structure

    Returns:
        Create statement followed by primary key and foreign key statements
    """
    name = table.get_name()
    keys = table.foreign_keys
    lines: List[str] = []
    if include_comments:
        lines.extend([
            f"-- Structure of the table '{name}'",
            f"-- Number of columns: {len(table)}",
            f"-- Number of foreign keys: {len(keys)}",
            f"-- Number of primary key columns: {table.primary_key_columns_count()}",
        ])
    lines.append(create_table_statement(table))

    primary = primary_key_statements(table)
    if primary:
        if include_comments:
            lines.append('-- Add primary key to the table.')
        lines.append(primary)

    if keys and include_comments:
        lines.append('-- Add foreign keys to the table.')
    for key in keys:
        statement = foreign_key_statement(key)
        if statement:
            lines.append(statement)

    if include_comments:
        lines.append(f"-- End of the structure of the table '{name}'")
    return '\n'.join(lines)


def alter_statement(table_name: str, operations: List[str]) -> str:
    """Generate 'alter table <name>' with one operation per line.

    Example:
        >>> alter_statement('users', ['add column age int(3)', 'drop column nick'])
        'alter table users\\nadd column age int(3),\\ndrop column nick;'
    """
    ops = [op.strip() for op in operations if isinstance(op, str) and op.strip()]
    if not ops:
        return ''
    return f"alter table {table_name}\n" + ',\n'.join(ops) + ';'


def create_view_statement(view_name: str, select_sql: str) -> str:
    """Wrap a select in 'create view <name> as (...)'."""
    body = select_sql.strip().rstrip(';')
    return f"create view {view_name} as ({body});"


def show_statement(thing: str) -> str:
    return f"show {thing.strip()};"
