"""
=========================================
Synthetic table describing a two-way join.
=========================================

A JoinTable merges the columns of a left and a right table so the join can
be queried like any other table (it becomes the derived table in
'select * from (select ... left join ...) as T0'). Source tables are only
read: their columns are copied, and copies whose SQL name exists on both
sides are renamed 'left_<name>' / 'right_<name>', with a numeric suffix when
that name is itself taken.

Unnamed joins are called T0, T1, ... by a JoinTableFactory. Each factory
keeps its own counter, so two builders never share naming state unless they
are given the same factory.

Example:
    >>> from schema.join_table import JoinTableFactory
    >>>
    >>> factory = JoinTableFactory()
    >>> joined = factory.create(articles, users)
    >>> joined.name
    'T0'
    >>> joined.set_join_condition({'author-id': 'user-id'}).condition
    'on articles.author_id = users.user_id'
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from schema.column import Column
from schema.results import FailureReason, Result, normalize_comparator, normalize_join_operator
from schema.table import Table

logger = logging.getLogger(__name__)

JOIN_TYPES = ('left', 'right', 'inner', 'cross')
DEFAULT_JOIN_TYPE = 'left'

LEFT = 'left'
RIGHT = 'right'


@dataclass
class JoinConditionResult:
    """Outcome of JoinTable.set_join_condition().

    Attributes:
        condition: The 'on ...' clause, or '' when no pair was usable
        applied: (left_key, right_key) pairs that made it into the condition
        skipped: (left_key, right_key, reason) for every rejected pair
    """

    condition: str = ''
    applied: List[Tuple[str, str]] = field(default_factory=list)
    skipped: List[Tuple[str, str, FailureReason]] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.condition)


def resolve_table(source) -> Table:
    """Return source itself if it is a Table, else source.get_linked_table().

    Raises:
        TypeError: If no Table can be obtained from source
    """
    if isinstance(source, Table):
        return source
    getter = getattr(source, 'get_linked_table', None)
    if callable(getter):
        table = getter()
        if isinstance(table, Table):
            return table
    raise TypeError(f"Cannot join {type(source).__name__}: expected a Table or a query builder")


def _free_name(candidate: str, taken, separator: str) -> str:
    """Return candidate, or candidate<sep>2, <sep>3, ... if it is already taken."""
    if candidate not in taken:
        return candidate
    number = 2
    while f"{candidate}{separator}{number}" in taken:
        number += 1
    return f"{candidate}{separator}{number}"


class JoinTable(Table):
    """Table formed by merging the columns of two tables.

    Attributes:
        left_table: Left source table (borrowed)
        right_table: Right source table (borrowed)
        join_type: One of left, right, inner, cross
        join_condition: 'on ...' clause, '' until set_join_condition() is called
    """

    def __init__(self, left, right, name: Optional[str] = None, join_type: str = DEFAULT_JOIN_TYPE,
                 factory: Optional['JoinTableFactory'] = None):
        """Merge two tables.

        Args:
            left: Table or query builder for the left side
            right: Table or query builder for the right side
            name: Join name; when missing or invalid the factory picks T<n>
            join_type: Join type, invalid values fall back to 'left'
            factory: Counter source for automatic names
        """
        left_table = resolve_table(left)
        right_table = resolve_table(right)
        super().__init__(mysql_version=left_table.mysql_version)
        # a derived table alias is never schema-qualified
        self._schema_name = None

        factory = factory or JoinTableFactory()
        auto_name = factory.next_name()
        if name is None or not self.set_name(name):
            self.set_name(auto_name)

        self._left_table = left_table
        self._right_table = right_table
        self._join_type = DEFAULT_JOIN_TYPE
        self._join_condition = ''
        self._origins: Dict[str, Tuple[str, str]] = {}
        self._common_names: List[str] = []

        self.set_join_type(join_type)
        self._merge_columns()

    def __repr__(self):
        return (
            f"JoinTable({self.name!r}, {self._left_table.name} {self._join_type} join "
            f"{self._right_table.name})"
        )

    @property
    def left_table(self) -> Table:
        return self._left_table

    @property
    def right_table(self) -> Table:
        return self._right_table

    @property
    def join_type(self) -> str:
        return self._join_type

    @property
    def join_condition(self) -> str:
        return self._join_condition

    @property
    def has_collisions(self) -> bool:
        return bool(self._common_names)

    @property
    def common_names(self) -> List[str]:
        """SQL names present in both source tables."""
        return list(self._common_names)

    def set_join_type(self, join_type: str) -> Result:
        lowered = join_type.strip().lower() if isinstance(join_type, str) else join_type
        if lowered not in JOIN_TYPES:
            return Result.failure(FailureReason.INVALID_VALUE, f"Unsupported join type: {join_type!r}")
        self._join_type = lowered
        return Result.success()

    def get_origin(self, key: str) -> Optional[Tuple[str, str]]:
        """Return ('left' | 'right', original key) for a merged column key."""
        if not isinstance(key, str):
            return None
        return self._origins.get(key.strip())

    def get_source_column(self, key: str) -> Optional[Column]:
        """Return the untouched column in the source table for a merged key."""
        origin = self.get_origin(key)
        if origin is None:
            return None
        side, original_key = origin
        source = self._left_table if side == LEFT else self._right_table
        return source.get_column(original_key)

    def _merge_columns(self) -> None:
        left_names = set(self._left_table.column_names())
        right_names = set(self._right_table.column_names())
        self._common_names = [n for n in self._left_table.column_names() if n in right_names]
        left_keys = set(self._left_table.column_keys())
        right_keys = set(self._right_table.column_keys())

        sides = (
            (LEFT, self._left_table, right_names, right_keys),
            (RIGHT, self._right_table, left_names, left_keys),
        )
        # (side, key, column, rename, prefix); unchanged names and keys are reserved first
        plan = []
        taken_names, taken_keys = set(), set()
        for side, source, other_names, other_keys in sides:
            for key, column in source.items():
                rename = column.name in other_names
                prefix = rename or key in other_keys
                plan.append((side, key, column, rename, prefix))
                if not rename:
                    taken_names.add(column.name)
                if not prefix:
                    taken_keys.add(key)

        for side, key, column, rename, prefix in plan:
            merged = copy.copy(column)
            merged._detach()
            merged_key = key
            if prefix:
                merged_key = _free_name(f"{side}-{key}", taken_keys, '-')
                taken_keys.add(merged_key)
            if rename:
                name = _free_name(f"{side}_{column.name}", taken_names, '_')
                taken_names.add(name)
                merged.set_name(name)

            result = self.add_column(merged_key, merged)
            if not result:
                logger.warning(f"Join {self.name}: could not add column '{merged_key}': {result.detail}")
                continue
            self._origins[merged_key] = (side, key)

    def set_join_condition(
        self,
        column_pairs: Union[Mapping[str, str], Iterable[Tuple[str, str]]],
        comparators: Optional[List[str]] = None,
        join_operators: Optional[List[str]] = None
    ) -> JoinConditionResult:
        """Build the 'on' clause from pairs of (left key, right key).

        Pairs whose columns cannot be found, or whose types differ, are left
        out of the condition and reported in the result with a warning.

        Args:
            column_pairs: Mapping or sequence of (left column key, right column key)
            comparators: One comparison per pair, padded with '='
            join_operators: 'and' / 'or' between pairs, padded with 'and'

        Returns:
            JoinConditionResult describing what was applied and skipped
        """
        pairs = list(column_pairs.items()) if isinstance(column_pairs, Mapping) else list(column_pairs)
        comparators = list(comparators or [])
        join_operators = list(join_operators or [])
        while len(comparators) < len(pairs):
            comparators.append('=')
        while len(join_operators) < len(pairs):
            join_operators.append('and')

        result = JoinConditionResult()
        left_name = self._left_table.get_name()
        right_name = self._right_table.get_name()
        parts = []
        for index, (left_key, right_key) in enumerate(pairs):
            left_col = self._left_table.get_column(left_key)
            right_col = self._right_table.get_column(right_key)
            reason = None
            if left_col is None or right_col is None:
                reason = FailureReason.NO_SUCH_COLUMN
            elif left_col.type != right_col.type:
                reason = FailureReason.TYPE_MISMATCH
            if reason is not None:
                logger.warning(
                    f"Join {self.name}: skipped pair {left_key!r} -> {right_key!r} ({reason.value})"
                )
                result.skipped.append((left_key, right_key, reason))
                continue

            predicate = (
                f"{left_name}.{left_col.name} {normalize_comparator(comparators[index])} "
                f"{right_name}.{right_col.name}"
            )
            if parts:
                parts.append(normalize_join_operator(join_operators[index - 1]))
            parts.append(predicate)
            result.applied.append((left_key, right_key))

        self._join_condition = f"on {' '.join(parts)}" if parts else ''
        result.condition = self._join_condition
        return result


class JoinTableFactory:
    """Creates JoinTables and names unnamed ones T0, T1, ...

    Example:
        >>> factory = JoinTableFactory()
        >>> factory.create(a, b).name, factory.create(a, c).name
        ('T0', 'T1')
        >>> factory.reset()
    """

    def __init__(self, prefix: str = 'T'):
        self._prefix = prefix
        self._count = 0

    @property
    def count(self) -> int:
        """Number of joins created since the last reset."""
        return self._count

    def next_name(self) -> str:
        name = f"{self._prefix}{self._count}"
        self._count += 1
        return name

    def create(self, left, right, name: Optional[str] = None, join_type: str = DEFAULT_JOIN_TYPE) -> JoinTable:
        return JoinTable(left, right, name=name, join_type=join_type, factory=self)

    def reset(self) -> None:
        self._count = 0
