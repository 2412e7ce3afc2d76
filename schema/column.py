"""
==========================================
Column definition for in-memory table models.
==========================================

A Column describes one table column: its SQL name, MySQL data type, size,
and constraint flags. Columns are attached to a Table with Table.add_column(),
which assigns their position index and a weak reference back to the table.

Types:
    Textual: varchar, text, mediumtext
    Temporal: datetime, timestamp
    Numeric: int, decimal, float, double, boolean
    Binary: tinyblob, blob, mediumblob, longblob

Example:
    >>> from schema.column import Column
    >>>
    >>> col = Column('user_name', 'varchar', 50)
    >>> col.set_unique(True)
    >>> str(col)
    'user_name varchar(50) not null unique'
"""

import logging
import weakref
from typing import Any, Optional

from schema.results import FailureReason, Result, is_valid_identifier

logger = logging.getLogger(__name__)

TEXT_TYPES = ('varchar', 'text', 'mediumtext')
DATE_TYPES = ('datetime', 'timestamp')
DECIMAL_TYPES = ('decimal', 'float', 'double')
BLOB_TYPES = ('tinyblob', 'blob', 'mediumblob', 'longblob')
SUPPORTED_TYPES = TEXT_TYPES + DATE_TYPES + DECIMAL_TYPES + BLOB_TYPES + ('int', 'boolean')

TYPE_ALIASES = {
    'integer': 'int',
    'bool': 'boolean',
}

# type: (min size, max size, default size)
SIZE_LIMITS = {
    'int': (1, 11, 11),
    'varchar': (1, 21845, 1),
    'decimal': (1, 65, 10),
}

DEFAULT_TYPE = 'varchar'
DEFAULT_NAME = 'col'
DEFAULT_SCALE = 2
MAX_SCALE = 30

CURRENT_TIMESTAMP = 'current_timestamp'


def _escape(text: str) -> str:
    return text.replace('\\', '\\\\').replace("'", "\\'")


def normalize_type(col_type) -> Optional[str]:
    """Map a user-supplied type name onto a supported type, or None."""
    if not isinstance(col_type, str):
        return None
    lowered = col_type.strip().lower()
    lowered = TYPE_ALIASES.get(lowered, lowered)
    return lowered if lowered in SUPPORTED_TYPES else None


class Column:
    """A single column of a table.

    Attributes:
        name: SQL name of the column
        type: Normalized MySQL data type
        size: Size for int/varchar/decimal, None for unsized types
        scale: Digits after the point for decimal columns
        index: Position in the owning table, -1 while unattached
        owner: Owning Table, or None (weak, non-owning reference)
    """

    def __init__(self, name: str = DEFAULT_NAME, col_type: str = DEFAULT_TYPE, size: Optional[int] = None):
        """Create a column.

        Args:
            name: SQL name; invalid names leave the default 'col'
            col_type: MySQL type; unrecognized types fall back to varchar(1)
            size: Optional size for sized types; out of range uses the type default
        """
        self._name = DEFAULT_NAME
        self._type = DEFAULT_TYPE
        self._size: Optional[int] = None
        self._scale: Optional[int] = None
        self._is_primary = False
        self._is_auto_increment = False
        self._is_unique = False
        self._is_nullable = False
        self._is_auto_update = False
        self._default: Any = None
        self._comment: Optional[str] = None
        self._index = -1
        self._owner_ref = None

        self.set_name(name)

        normalized = normalize_type(col_type)
        if normalized is None:
            logger.warning(f"Unsupported column type '{col_type}', using {DEFAULT_TYPE}")
            self._type = DEFAULT_TYPE
            self._size = SIZE_LIMITS[DEFAULT_TYPE][2]
        else:
            self._type = normalized
            if normalized == 'decimal':
                self._scale = DEFAULT_SCALE
            if normalized in SIZE_LIMITS:
                self._size = SIZE_LIMITS[normalized][2]
                if size is not None:
                    self.set_size(size)

    def __repr__(self):
        return f"Column(name={self._name!r}, type={self._type!r}, size={self._size!r})"

    def __str__(self):
        return self.get_definition()

    # ------------------------------------------------------------------
    # Plain attributes
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def type(self) -> str:
        return self._type

    @property
    def size(self) -> Optional[int]:
        return self._size

    @property
    def scale(self) -> Optional[int]:
        return self._scale

    @property
    def index(self) -> int:
        return self._index

    @property
    def owner(self):
        """The owning Table, if it is still alive."""
        return self._owner_ref() if self._owner_ref is not None else None

    @property
    def default(self) -> Any:
        return self._default

    @property
    def comment(self) -> Optional[str]:
        return self._comment

    @property
    def is_primary(self) -> bool:
        return self._is_primary

    @property
    def is_auto_increment(self) -> bool:
        return self._is_auto_increment

    @property
    def is_unique(self) -> bool:
        return self._is_unique

    @property
    def is_nullable(self) -> bool:
        return self._is_nullable

    @property
    def is_auto_update(self) -> bool:
        return self._is_auto_update

    def is_text(self) -> bool:
        return self._type in TEXT_TYPES

    def is_date(self) -> bool:
        return self._type in DATE_TYPES

    def is_decimal(self) -> bool:
        return self._type in DECIMAL_TYPES

    def is_blob(self) -> bool:
        return self._type in BLOB_TYPES

    # ------------------------------------------------------------------
    # Validating setters
    # ------------------------------------------------------------------

    def set_name(self, name: str) -> Result:
        """Set the SQL name. Leading/trailing spaces are ignored."""
        trimmed = name.strip() if isinstance(name, str) else name
        if not is_valid_identifier(trimmed):
            logger.debug(f"Rejected column name {name!r}")
            return Result.failure(FailureReason.INVALID_IDENTIFIER, f"Invalid column name: {name!r}")
        self._name = trimmed
        return Result.success()

    def set_size(self, size: int) -> Result:
        """Set the size of an int, varchar or decimal column."""
        limits = SIZE_LIMITS.get(self._type)
        if limits is None:
            return Result.failure(FailureReason.TYPE_MISMATCH, f"Type '{self._type}' has no size")
        if isinstance(size, bool) or not isinstance(size, int) or not limits[0] <= size <= limits[1]:
            return Result.failure(FailureReason.INVALID_VALUE, f"Size out of range for {self._type}: {size!r}")
        self._size = size
        if self._scale is not None and self._scale > size:
            self._scale = size
        return Result.success()

    def set_scale(self, scale: int) -> Result:
        """Set digits after the decimal point (decimal columns only)."""
        if self._type != 'decimal':
            return Result.failure(FailureReason.TYPE_MISMATCH, "Scale only applies to decimal columns")
        if isinstance(scale, bool) or not isinstance(scale, int) or not 0 <= scale <= min(MAX_SCALE, self._size):
            return Result.failure(FailureReason.INVALID_VALUE, f"Invalid scale: {scale!r}")
        self._scale = scale
        return Result.success()

    def set_primary(self, is_primary: bool) -> None:
        """Mark the column as (part of) the primary key. Primary implies not null."""
        self._is_primary = is_primary is True
        if self._is_primary:
            self._is_nullable = False
        else:
            self._is_auto_increment = False

    def set_auto_increment(self, auto_increment: bool) -> Result:
        """Mark an int primary column as auto increment."""
        if auto_increment and self._type != 'int':
            return Result.failure(FailureReason.TYPE_MISMATCH, "Only int columns can auto increment")
        if auto_increment and not self._is_primary:
            return Result.failure(FailureReason.INVALID_VALUE, "Auto increment requires a primary column")
        self._is_auto_increment = auto_increment is True
        return Result.success()

    def set_unique(self, is_unique: bool) -> None:
        self._is_unique = is_unique is True

    def set_nullable(self, is_nullable: bool) -> Result:
        if is_nullable and self._is_primary:
            return Result.failure(FailureReason.INVALID_VALUE, "A primary column cannot be null")
        self._is_nullable = is_nullable is True
        return Result.success()

    def set_default(self, value: Any = None) -> Result:
        """Set the default value.

        With no value, temporal columns default to the current timestamp and
        other columns have their default cleared.

        Args:
            value: Default value. Must be numeric for numeric columns and a
                string for textual and temporal ones. Blob columns take none.

        Returns:
            Result of the validation
        """
        if value is None:
            self._default = CURRENT_TIMESTAMP if self.is_date() else None
            return Result.success()
        if self.is_blob():
            return Result.failure(FailureReason.TYPE_MISMATCH, "Blob columns cannot have a default")
        if self._type == 'boolean':
            if not isinstance(value, bool):
                return Result.failure(FailureReason.INVALID_VALUE, f"Expected bool default, got {value!r}")
        elif self._type == 'int':
            if isinstance(value, bool) or not isinstance(value, int):
                return Result.failure(FailureReason.INVALID_VALUE, f"Expected int default, got {value!r}")
        elif self.is_decimal():
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                return Result.failure(FailureReason.INVALID_VALUE, f"Expected numeric default, got {value!r}")
        elif not isinstance(value, str):
            return Result.failure(FailureReason.INVALID_VALUE, f"Expected string default, got {value!r}")
        self._default = value
        return Result.success()

    def auto_update(self) -> Result:
        """Make a datetime/timestamp column update itself when the row changes."""
        if not self.is_date():
            return Result.failure(FailureReason.TYPE_MISMATCH, "Only temporal columns can auto update")
        self._is_auto_update = True
        return Result.success()

    def set_comment(self, comment: Optional[str]) -> None:
        self._comment = comment.strip() if isinstance(comment, str) and comment.strip() else None

    # ------------------------------------------------------------------
    # Ownership (managed by Table)
    # ------------------------------------------------------------------

    def _attach(self, table, index: int) -> None:
        self._owner_ref = weakref.ref(table)
        self._index = index

    def _detach(self) -> None:
        self._owner_ref = None
        self._index = -1

    def _set_index(self, index: int) -> None:
        self._index = index

    # ------------------------------------------------------------------
    # DDL
    # ------------------------------------------------------------------

    def type_definition(self) -> str:
        """Return the type with its size, e.g. 'varchar(50)' or 'decimal(10,2)'."""
        if self._type == 'decimal':
            return f"decimal({self._size},{self._scale})"
        if self._size is not None:
            return f"{self._type}({self._size})"
        return self._type

    def _default_literal(self) -> Optional[str]:
        if self._default is None:
            return None
        if self._default == CURRENT_TIMESTAMP and self.is_date():
            return CURRENT_TIMESTAMP
        if self._type == 'boolean':
            return '1' if self._default else '0'
        if self._type == 'int':
            return str(self._default)
        return f"'{_escape(str(self._default))}'"

    def get_definition(self, include_auto_increment: bool = False) -> str:
        """Build the column definition used in create/alter statements.

        Args:
            include_auto_increment: Append 'auto_increment' when the column is
                auto increment. Off by default because MySQL needs the primary
                key in place first.

        Returns:
            Column definition string
        """
        parts = [self._name, self.type_definition()]
        parts.append('null' if self._is_nullable else 'not null')
        if self._is_unique:
            parts.append('unique')
        default = self._default_literal()
        if default is not None:
            parts.append(f"default {default}")
        if self._is_auto_update:
            parts.append('on update current_timestamp')
        if include_auto_increment and self._is_auto_increment:
            parts.append('auto_increment')
        owner = self.owner
        if owner is not None and self.is_text():
            parts.append(f"collate {owner.get_collation()}")
        if self._comment:
            parts.append(f"comment '{_escape(self._comment)}'")
        return ' '.join(parts)
