"""
===========================================
Data Manipulation Language (DML) Utilities.
===========================================

Assembles insert / update / delete text from already formatted pieces.
Values must come through sql.literals.format_value() and conditions through
sql.conditions.build_where_clause(); nothing here quotes or escapes.

Functions:
- insert_statement: insert into <table> (cols) values (vals);
- update_statement: update <table> set a = x, b = y [where ...];
- delete_statement: delete from <table> [where ...];
- update_blob_statement: update <table> set blob = '...' where id = N;

Usage:
    from sql.dml import insert_statement, update_statement

    insert_sql = insert_statement('users', ['name', 'age'], ["'Alice'", '30'])
    update_sql = update_statement('users', [('age', '31')], "where name = 'Alice'")
"""

from typing import List, Sequence, Tuple


def insert_statement(table_name: str, column_names: Sequence[str], literals: Sequence[str]) -> str:
    """
    Generate an INSERT statement for one row.

    Args:
        table_name: Target table (optionally schema-qualified)
        column_names: SQL column names
        literals: Formatted values, same order as column_names

    Returns:
        SQL INSERT statement

    Example:
        >>> insert_statement('users', ['name'], ["'Alice'"])
        "insert into users (name) values ('Alice');"
    """
    return f"insert into {table_name} ({', '.join(column_names)}) values ({', '.join(literals)});"


def _with_where(sql: str, where: str) -> str:
    return f"{sql} {where};" if where else f"{sql};"


def update_statement(table_name: str, assignments: List[Tuple[str, str]], where: str = '') -> str:
    """
    Generate an UPDATE statement.

    Args:
        table_name: Target table
        assignments: (column name, formatted value) pairs
        where: Optional 'where ...' clause

    Returns:
        SQL UPDATE statement
    """
    set_clause = ', '.join(f"{name} = {literal}" for name, literal in assignments)
    return _with_where(f"update {table_name} set {set_clause}", where)


def delete_statement(table_name: str, where: str = '') -> str:
    """Generate a DELETE statement; without a where clause every row is deleted."""
    return _with_where(f"delete from {table_name}", where)


def update_blob_statement(
    table_name: str,
    assignments: List[Tuple[str, str]],
    id_column: str,
    id_literal: str
) -> str:
    """
    Generate an UPDATE that stores file content in blob columns of one row.

    Args:
        table_name: Target table
        assignments: (column name, inlined file literal) pairs
        id_column: Column identifying the row
        id_literal: Formatted identifier value

    Returns:
        SQL UPDATE statement ending with ';'
    """
    return update_statement(table_name, assignments, f"where {id_column} = {id_literal}")
