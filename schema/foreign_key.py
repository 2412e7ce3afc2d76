"""
=====================================
Foreign key constraint description.
=====================================

A ForeignKey links columns of its source (owning) table to columns of a
referenced table. It only carries data; the alter statement is produced by
sql.ddl.foreign_key_statement(). Keys are normally built through
Table.add_reference() / Table.add_multi_reference(), which check that every
named column exists before attaching the key.

Both table references are borrowed: a key never owns the tables it links.

Example:
    >>> from schema.foreign_key import ForeignKey
    >>>
    >>> fk = ForeignKey('author_fk', referenced_table=users)
    >>> fk.add_reference_column('user_id')
    >>> fk.add_source_column('author_id')
    >>> fk.set_on_delete('cascade')
    >>> articles.add_foreign_key(fk)
"""

import logging
from typing import List, Optional

from schema.results import FailureReason, Result, is_valid_identifier

logger = logging.getLogger(__name__)

FK_ACTIONS = ('set null', 'cascade', 'restrict', 'set default', 'no action')
DEFAULT_ACTION = 'set null'


def normalize_action(action) -> str:
    """Return a supported referential action; anything else becomes 'set null'."""
    if isinstance(action, str):
        lowered = ' '.join(action.lower().split())
        if lowered in FK_ACTIONS:
            return lowered
    return DEFAULT_ACTION


class ForeignKey:
    """A named referential constraint.

    Attributes:
        key_name: Constraint name, unique within the source table
        source_table: Owning table, set when the key is attached
        referenced_table: Table whose columns are referenced
        source_columns: SQL names of the owning table's columns
        referenced_columns: SQL names of the referenced table's columns
        on_update: Action on update of the referenced row
        on_delete: Action on delete of the referenced row
    """

    def __init__(self, key_name: str = 'key_name', referenced_table=None):
        self._key_name = 'key_name'
        self.set_key_name(key_name)
        self._source_table = None
        self._referenced_table = referenced_table
        self._source_columns: List[str] = []
        self._referenced_columns: List[str] = []
        self._on_update = DEFAULT_ACTION
        self._on_delete = DEFAULT_ACTION

    def __repr__(self):
        return (
            f"ForeignKey({self._key_name!r}, source={self._source_columns!r}, "
            f"references={self._referenced_columns!r})"
        )

    @property
    def key_name(self) -> str:
        return self._key_name

    @property
    def source_table(self):
        return self._source_table

    @property
    def referenced_table(self):
        return self._referenced_table

    @property
    def source_columns(self) -> List[str]:
        return list(self._source_columns)

    @property
    def referenced_columns(self) -> List[str]:
        return list(self._referenced_columns)

    @property
    def on_update(self) -> str:
        return self._on_update

    @property
    def on_delete(self) -> str:
        return self._on_delete

    def set_key_name(self, name: str) -> Result:
        """Set the constraint name. Invalid names leave the old one in place."""
        trimmed = name.strip() if isinstance(name, str) else name
        if not is_valid_identifier(trimmed):
            logger.debug(f"Rejected foreign key name {name!r}")
            return Result.failure(FailureReason.INVALID_IDENTIFIER, f"Invalid key name: {name!r}")
        self._key_name = trimmed
        return Result.success()

    def set_referenced_table(self, table) -> None:
        self._referenced_table = table

    def _set_source_table(self, table) -> None:
        self._source_table = table

    def add_source_column(self, column_name: str) -> Result:
        """Append a column name on the owning side."""
        return self._append(self._source_columns, column_name)

    def add_reference_column(self, column_name: str) -> Result:
        """Append a column name on the referenced side."""
        return self._append(self._referenced_columns, column_name)

    @staticmethod
    def _append(target: List[str], column_name: str) -> Result:
        trimmed = column_name.strip() if isinstance(column_name, str) else column_name
        if not is_valid_identifier(trimmed):
            return Result.failure(FailureReason.INVALID_IDENTIFIER, f"Invalid column name: {column_name!r}")
        target.append(trimmed)
        return Result.success()

    def set_on_update(self, action: str) -> str:
        """Set the on-update action and return the normalized value."""
        self._on_update = normalize_action(action)
        return self._on_update

    def set_on_delete(self, action: str) -> str:
        """Set the on-delete action and return the normalized value."""
        self._on_delete = normalize_action(action)
        return self._on_delete

    def get_source_name(self, qualified: bool = True) -> Optional[str]:
        return self._source_table.get_name(qualified) if self._source_table is not None else None

    def get_referenced_name(self, qualified: bool = True) -> Optional[str]:
        return self._referenced_table.get_name(qualified) if self._referenced_table is not None else None
