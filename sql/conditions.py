"""
==================================================
WHERE / ORDER BY / GROUP BY clause construction.
==================================================

Shared by every builder that filters rows (select, select_count, update,
delete). Conditions are given as parallel lists of columns and values plus
optional comparators and join operators:

    columns        [name_col, age_col]
    values         ["O'Brien", 30]
    comparators    ['=', '>']           padded with '='
    join_operators ['and']              padded with 'and', one fewer than columns

Functions:
    create_where_conditions: Build 'where ...' from parallel lists
    build_where_clause: Same, but refuses filters it cannot render in full
    create_date_condition: year()/month()/... conjunction for a date column
    split_conditions: Turn a {key: value} / {value: Column} mapping into lists
    resolve_column: Find a column by key or position
    build_order_by: 'order by a asc, b desc'
    build_group_by: 'group by a, b'

Example:
    >>> from sql.conditions import create_where_conditions
    >>> create_where_conditions([name_col, age_col], ["O'Brien", 30], ['=', '>'], ['and'])
    "where name = 'O\\\\'Brien' and age > 30"
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from schema.column import Column
from schema.results import FailureReason, Result, normalize_comparator, normalize_join_operator
from schema.table import Table
from sql.literals import escape_mysql_special_chars

logger = logging.getLogger(__name__)

DEFAULT_DATE_FORMAT = 'YYYY-MM-DD HH:MM:SS'

# format: (pattern, components)
DATE_FORMATS = {
    'YYYY-MM-DD HH:MM:SS': (
        re.compile(r'(\d{4})-(\d{1,2})-(\d{1,2})\s+(\d{1,2}):(\d{1,2}):(\d{1,2})'),
        ('year', 'month', 'day', 'hour', 'minute', 'second'),
    ),
    'YYYY-MM-DD': (re.compile(r'(\d{4})-(\d{1,2})-(\d{1,2})'), ('year', 'month', 'day')),
    'YYYY': (re.compile(r'(\d{4})'), ('year',)),
    'MM': (re.compile(r'(\d{1,2})'), ('month',)),
    'DD': (re.compile(r'(\d{1,2})'), ('day',)),
    'HH:MM:SS': (re.compile(r'(\d{1,2}):(\d{1,2}):(\d{1,2})'), ('hour', 'minute', 'second')),
    'HH': (re.compile(r'(\d{1,2})'), ('hour',)),
    'SS': (re.compile(r'(\d{1,2})'), ('second',)),
}

COMPONENT_RANGES = {
    'year': (1901, 9999),
    'month': (1, 12),
    'day': (1, 31),
    'hour': (0, 23),
    'minute': (0, 59),
    'second': (0, 59),
}

NULL_PHRASES = ('IS NULL', 'IS NOT NULL')
ORDER_TYPES = {'a': 'asc', 'asc': 'asc', 'd': 'desc', 'desc': 'desc'}


@dataclass(frozen=True)
class DateValue:
    """A partial date to match against a datetime/timestamp column.

    Example:
        >>> DateValue('2019', 'YYYY')
    """

    value: Any
    format: str = DEFAULT_DATE_FORMAT


def create_date_condition(date: Any, column_name: str, date_format: str = DEFAULT_DATE_FORMAT) -> str:
    """Build a conjunction matching the parts of a date.

    Supported formats (case-insensitive): YYYY-MM-DD HH:MM:SS, YYYY-MM-DD,
    YYYY, MM (month), DD, HH:MM:SS, HH, SS.

    Args:
        date: Date text (or int for single-component formats)
        column_name: Column the functions are applied to
        date_format: One of the supported formats

    Returns:
        e.g. 'year(col) = 2019 and month(col) = 3', or '' if the format is
        unknown or any component is out of range
    """
    fmt = date_format.strip().upper() if isinstance(date_format, str) else ''
    if fmt not in DATE_FORMATS or date is None or isinstance(date, bool):
        return ''
    pattern, components = DATE_FORMATS[fmt]
    match = pattern.fullmatch(str(date).strip())
    if match is None:
        return ''

    parts = []
    for component, raw in zip(components, match.groups()):
        number = int(raw)
        low, high = COMPONENT_RANGES[component]
        if not low <= number <= high:
            return ''
        parts.append(f"{component}({column_name}) = {number}")
    return ' and '.join(parts)


def _qualified(column: Column, qualifier: Optional[str]) -> str:
    return f"{qualifier}.{column.name}" if qualifier else column.name


def _predicate(column: Column, value: Any, comparator: str, qualifier: Optional[str]) -> str:
    name = _qualified(column, qualifier)
    if value is None:
        return f"{name} IS NULL"
    if isinstance(value, str) and value.strip().upper() in NULL_PHRASES:
        return f"{name} {value.strip().upper()}"

    comparator = normalize_comparator(comparator)
    if column.is_text():
        return f"{name} {comparator} '{escape_mysql_special_chars(value)}'"
    if column.is_decimal():
        return f"{name} {comparator} '{escape_mysql_special_chars(value)}'"
    if column.is_date():
        if isinstance(value, DateValue):
            condition = create_date_condition(value.value, name, value.format)
        elif isinstance(value, Mapping) and 'value' in value:
            condition = create_date_condition(value['value'], name, value.get('format', DEFAULT_DATE_FORMAT))
        else:
            return f"date({name}) {comparator} '{escape_mysql_special_chars(value)}'"
        if not condition:
            logger.warning(f"Ignoring invalid date condition on '{name}': {value!r}")
            return ''
        return f"({condition})"
    if isinstance(value, bool):
        return f"{name} {comparator} {1 if value else 0}"
    return f"{name} {comparator} {value}"


def _assemble(
    columns: Sequence[Optional[Column]],
    values: Sequence[Any],
    comparators: Optional[List[str]],
    join_operators: Optional[List[str]],
    qualifier: Optional[str]
) -> Tuple[str, Result]:
    count = len(columns)
    if count != len(values):
        return '', Result.failure(
            FailureReason.LENGTH_MISMATCH, f"{count} where columns but {len(values)} values"
        )
    if count == 0:
        return '', Result.success()
    comparators = list(comparators or [])
    join_operators = list(join_operators or [])
    while len(comparators) < count:
        comparators.append('=')
    while len(join_operators) < count - 1:
        join_operators.append('and')
    if len(comparators) != count or len(join_operators) != count - 1:
        logger.debug(
            f"Where clause dropped: {count} columns, {len(comparators)} comparators, "
            f"{len(join_operators)} join operators"
        )
        return '', Result.failure(
            FailureReason.LENGTH_MISMATCH,
            f"{count} where columns, {len(comparators)} comparators, {len(join_operators)} join operators"
        )

    parts, problem = [], Result.success()
    for index, (column, value) in enumerate(zip(columns, values)):
        if not isinstance(column, Column):
            if problem:
                problem = Result.failure(
                    FailureReason.NO_SUCH_COLUMN, f"Where entry {index} (value {value!r}) matches no column"
                )
            continue
        predicate = _predicate(column, value, comparators[index], qualifier)
        if not predicate:
            if problem:
                problem = Result.failure(
                    FailureReason.INVALID_VALUE, f"Invalid condition on '{column.name}': {value!r}"
                )
            continue
        if parts:
            parts.append(normalize_join_operator(join_operators[index - 1]))
        parts.append(predicate)

    return (f"where {' '.join(parts)}" if parts else ''), problem


def create_where_conditions(
    columns: Sequence[Optional[Column]],
    values: Sequence[Any],
    comparators: Optional[List[str]] = None,
    join_operators: Optional[List[str]] = None,
    qualifier: Optional[str] = None
) -> str:
    """Build a where clause from parallel lists.

    Columns that are None (unresolved keys) are skipped. Each emitted
    predicate after the first is preceded by the join operator that sits
    before it in join_operators.

    Args:
        columns: Columns to filter on (None entries are skipped)
        values: One value per column; 'IS NULL' / 'IS NOT NULL' / None test nullness
        comparators: One of =, !=, <, <=, >, >= per column
        join_operators: 'and' / 'or' between consecutive predicates
        qualifier: Optional table alias put in front of every column name

    Returns:
        'where ...' or '' when nothing applies or the list lengths disagree
    """
    clause, _ = _assemble(columns, values, comparators, join_operators, qualifier)
    return clause


def build_where_clause(
    columns: Sequence[Optional[Column]],
    values: Sequence[Any],
    comparators: Optional[List[str]] = None,
    join_operators: Optional[List[str]] = None,
    qualifier: Optional[str] = None
) -> Tuple[str, Result]:
    """Strict form of create_where_conditions() used by the statement builders.

    A filter that cannot be rendered in full is refused instead of being
    narrowed, so an update or delete never widens to more rows than asked.

    Returns:
        (clause, result). On failure the clause is '' and the result reason is
        LENGTH_MISMATCH, NO_SUCH_COLUMN (an entry without a column) or
        INVALID_VALUE (a date condition that does not parse).
    """
    clause, result = _assemble(columns, values, comparators, join_operators, qualifier)
    if not result:
        logger.warning(f"Where clause refused: {result.detail}")
        return '', result
    return clause, result


def resolve_column(table: Table, key_or_index: Union[str, int]) -> Optional[Column]:
    """Find a column by position (int) or by key (str)."""
    if isinstance(key_or_index, Column):
        return key_or_index
    if isinstance(key_or_index, int) and not isinstance(key_or_index, bool):
        return table.get_column_by_index(key_or_index)
    return table.get_column(key_or_index)


def _pairs(mapping: Union[Mapping, Iterable[Tuple[Any, Any]], None]) -> List[Tuple[Any, Any]]:
    if mapping is None:
        return []
    if isinstance(mapping, Mapping):
        return list(mapping.items())
    return list(mapping)


def split_conditions(table: Table, where) -> Tuple[List[Optional[Column]], List[Any]]:
    """Turn a where mapping into parallel column / value lists.

    Each entry is either key-or-index -> value, Column -> value, or
    value -> Column (the Column object takes precedence).
    """
    columns, values = [], []
    for key, value in _pairs(where):
        if isinstance(value, Column):
            columns.append(value)
            values.append(key)
        else:
            columns.append(resolve_column(table, key))
            values.append(value)
    return columns, values


def _order_entry(entry) -> Tuple[Any, Optional[str]]:
    if isinstance(entry, Mapping):
        return entry.get('col'), entry.get('order-type', entry.get('order_type'))
    if isinstance(entry, (tuple, list)) and entry:
        return entry[0], entry[1] if len(entry) > 1 else None
    return entry, None


def build_order_by(table: Table, order_by, qualifier: Optional[str] = None) -> str:
    """Build 'order by ...' from keys, (key, type) pairs or {'col', 'order-type'} dicts.

    Order types a/asc and d/desc (any case) are honored; others are omitted.
    Unknown columns are skipped.
    """
    parts = []
    for entry in order_by or []:
        key, order_type = _order_entry(entry)
        column = resolve_column(table, key)
        if column is None:
            continue
        text = _qualified(column, qualifier)
        direction = ORDER_TYPES.get(order_type.strip().lower()) if isinstance(order_type, str) else None
        if direction:
            text += f" {direction}"
        parts.append(text)
    return f"order by {', '.join(parts)}" if parts else ''


def build_group_by(table: Table, group_by, qualifier: Optional[str] = None) -> str:
    """Build 'group by ...' from column keys or {'col': key} dicts."""
    names = []
    for entry in group_by or []:
        key, _ = _order_entry(entry)
        column = resolve_column(table, key)
        if column is not None:
            names.append(_qualified(column, qualifier))
    return f"group by {', '.join(names)}" if names else ''
