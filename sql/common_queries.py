"""
==============================
Common MySQL metadata queries.
==============================

Fixed information_schema queries used to inspect a schema. All functions
return complete statements ending with ';'. Names carry the '_sql' suffix
used by metadata helpers.

Pattern Functions:
- schema_tables_count_sql: Number of base tables in a schema (column tables_count)
- schema_tables_sql: Names of base tables in a schema (column TABLE_NAME)
- schema_views_count_sql: Number of views in a schema (column views_count)
- schema_views_sql: Names of views in a schema (column TABLE_NAME)

Usage:
    from sql.common_queries import schema_tables_count_sql

    query = schema_tables_count_sql('shop')
"""

from sql.literals import escape_mysql_special_chars

BASE_TABLE = 'BASE TABLE'
VIEW = 'VIEW'


def _schema_filter(table_type: str, schema_name: str) -> str:
    return (
        f"from information_schema.tables where TABLE_TYPE = '{table_type}' "
        f"and TABLE_SCHEMA = '{escape_mysql_special_chars(schema_name)}';"
    )


def schema_tables_count_sql(schema_name: str) -> str:
    """
    Generate SQL counting the base tables of a schema.

    Args:
        schema_name: Schema to inspect

    Returns:
        Query with one row and one column, tables_count (0 if the schema
        does not exist)
    """
    return f"select count(*) as tables_count {_schema_filter(BASE_TABLE, schema_name)}"


def schema_tables_sql(schema_name: str) -> str:
    """
    Generate SQL listing the base tables of a schema.

    Args:
        schema_name: Schema to inspect

    Returns:
        Query with one column, TABLE_NAME
    """
    return f"select TABLE_NAME {_schema_filter(BASE_TABLE, schema_name)}"


def schema_views_count_sql(schema_name: str) -> str:
    """Generate SQL counting the views of a schema (column views_count)."""
    return f"select count(*) as views_count {_schema_filter(VIEW, schema_name)}"


def schema_views_sql(schema_name: str) -> str:
    """Generate SQL listing the views of a schema (column TABLE_NAME)."""
    return f"select TABLE_NAME {_schema_filter(VIEW, schema_name)}"
