"""
==========================================
Option structures for QueryBuilder methods.
==========================================

Each builder operation with many optional settings takes one dataclass.
from_dict() accepts the hyphenated spelling used by older callers
('select-max', 'condition-cols-and-vals', 'join-operators', 'as', ...)
and raises UnknownOptionError for keys it does not know.

Example:
    >>> from sql.options import SelectOptions
    >>>
    >>> opts = SelectOptions.from_dict({
    ...     'where': {'user-id': 7},
    ...     'order-by': [{'col': 'name', 'order-type': 'a'}],
    ...     'limit': 10,
    ... })
    >>> opts.limit
    10
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from core.options import UnknownOptionError, parse_options
from schema.table import DefaultColumnSpec, DefaultColumnsOptions

__all__ = [
    'SelectOptions',
    'SelectCountOptions',
    'DefaultColumnSpec',
    'DefaultColumnsOptions',
    'UnknownOptionError',
]

SELECT_ALIASES = {
    'condition-cols-and-vals': 'where',
    'colums': 'columns',
}

COUNT_ALIASES = {
    'as': 'alias',
}


@dataclass
class SelectOptions:
    """Options for QueryBuilder.select().

    Attributes:
        columns: Column keys to select; '*' when empty or none resolve
        where: {key: value} / {value: Column} filter mapping
        conditions: Comparators, one per where entry
        join_operators: 'and' / 'or' between where entries
        limit: Row limit, ignored unless > 0
        offset: Row offset, ignored unless > 0 (and limit > 0)
        select_max: Select max(column)
        select_min: Select min(column)
        column: Column key used by select_max / select_min
        rename_to: Alias for the aggregate
        order_by: Keys, (key, type) pairs or {'col', 'order-type'} dicts
        group_by: Keys or {'col'} dicts
        as_view: Wrap the select in 'create view'
        view_name: Name of the view
    """

    columns: List[str] = field(default_factory=list)
    where: Any = None
    conditions: List[str] = field(default_factory=list)
    join_operators: List[str] = field(default_factory=list)
    limit: int = -1
    offset: int = -1
    select_max: bool = False
    select_min: bool = False
    column: Optional[str] = None
    rename_to: str = ''
    order_by: Optional[List[Any]] = None
    group_by: Optional[List[Any]] = None
    as_view: bool = False
    view_name: str = ''

    @classmethod
    def from_dict(cls, options: Optional[Dict[str, Any]]) -> 'SelectOptions':
        return parse_options(cls, options, SELECT_ALIASES)


@dataclass
class SelectCountOptions:
    """Options for QueryBuilder.select_count().

    Attributes:
        alias: Name of the count column; spaces become underscores
        where: Filter mapping, as in SelectOptions
        conditions: Comparators
        join_operators: 'and' / 'or' between where entries
    """

    alias: str = 'count'
    where: Any = None
    conditions: List[str] = field(default_factory=list)
    join_operators: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, options: Optional[Dict[str, Any]]) -> 'SelectCountOptions':
        return parse_options(cls, options, COUNT_ALIASES)
