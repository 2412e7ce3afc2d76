"""
===================================
In-memory MySQL table description.
===================================

A Table is an ordered, keyed collection of Columns plus a list of
ForeignKeys, together with storage options (engine, charset, collation).
Columns are stored under a caller-chosen key (e.g. 'user-id') that is
independent of the column's SQL name (e.g. 'user_id').

Key Features:
    - Name validation with silent fallback (Result instead of exceptions)
    - Default id / created_on / last_updated columns
    - Foreign key attachment with column existence checks
    - Collation derived from the configured MySQL version
    - Dependency order for migration scripts

Example:
    >>> from schema.column import Column
    >>> from schema.table import Table
    >>>
    >>> users = Table('users')
    >>> users.add_default_columns()
    >>> users.add_column('email', Column('email', 'varchar', 128))
    >>> users.get_column('email').index
    3
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

from core.config import config
from core.options import parse_options
from schema.column import Column
from schema.foreign_key import ForeignKey
from schema.results import FailureReason, Result, is_valid_identifier, is_valid_key

logger = logging.getLogger(__name__)

DEFAULT_TABLE_NAME = 'table'
LEGACY_COLLATION = 'utf8mb4_unicode_ci'
COLLATION = 'utf8mb4_unicode_520_ci'


@dataclass
class DefaultColumnSpec:
    """Overrides for one default column.

    Attributes:
        key_name: Key of the column inside the Table
        db_name: SQL name of the column
    """

    key_name: Optional[str] = None
    db_name: Optional[str] = None


@dataclass
class DefaultColumnsOptions:
    """Which default columns to add. None means the column is skipped.

    Dict form: {'id': {...}, 'created-on': {...}, 'last-updated': {...}}
    where each value may hold 'key-name' and 'db-name'.
    """

    id: Optional[DefaultColumnSpec] = None
    created_on: Optional[DefaultColumnSpec] = None
    last_updated: Optional[DefaultColumnSpec] = None

    def __post_init__(self):
        for name in ('id', 'created_on', 'last_updated'):
            value = getattr(self, name)
            if value is not None:
                setattr(self, name, parse_options(DefaultColumnSpec, value))

    @classmethod
    def all(cls) -> 'DefaultColumnsOptions':
        return cls(DefaultColumnSpec(), DefaultColumnSpec(), DefaultColumnSpec())

    @classmethod
    def from_dict(cls, options: Optional[Dict[str, Any]]) -> 'DefaultColumnsOptions':
        return parse_options(cls, options)


def parse_version(version) -> Optional[Tuple[int, int]]:
    """Parse 'major.minor[.patch]' into (major, minor), or None if malformed."""
    if not isinstance(version, str):
        return None
    parts = version.strip().split('.')
    if len(parts) < 2:
        return None
    try:
        major, minor = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if major < 0 or minor < 0:
        return None
    return major, minor


class Table:
    """A MySQL table description.

    Attributes:
        name: Table name (see get_name for the schema-qualified form)
        schema_name: Optional schema the table lives in
        engine: Storage engine
        charset: Character set
        order: Dependency order among tables (advisory)
        comment: Optional table comment
    """

    def __init__(
        self,
        name: str = DEFAULT_TABLE_NAME,
        mysql_version: Optional[str] = None,
        engine: Optional[str] = None,
        charset: Optional[str] = None
    ):
        """Create an empty table.

        Args:
            name: Table name; invalid names fall back to 'table'
            mysql_version: Server version; defaults to config.mysql_version
            engine: Storage engine; defaults to config.engine
            charset: Character set; defaults to config.charset
        """
        self._name = DEFAULT_TABLE_NAME
        self._schema_name: Optional[str] = None
        self._mysql_version = '5.5'
        self._engine = config.engine
        self._charset = config.charset
        self._order = 0
        self._comment: Optional[str] = None
        self._columns: Dict[str, Column] = {}
        self._foreign_keys: List[ForeignKey] = []

        if not self.set_name(name):
            self.set_name(DEFAULT_TABLE_NAME)
        self.set_mysql_version(mysql_version or config.mysql_version)
        if engine:
            self.set_engine(engine)
        if charset:
            self.set_charset(charset)
        if config.schema_name:
            self.set_schema_name(config.schema_name)

    def __repr__(self):
        return f"{type(self).__name__}({self.get_name()!r}, columns={self.column_keys()!r})"

    def __len__(self):
        return len(self._columns)

    # ------------------------------------------------------------------
    # Naming and storage options
    # ------------------------------------------------------------------

    def get_name(self, qualified: bool = True) -> str:
        """Return the table name, prefixed with the schema name when set."""
        if qualified and self._schema_name:
            return f"{self._schema_name}.{self._name}"
        return self._name

    @property
    def name(self) -> str:
        return self._name

    def set_name(self, name: str) -> Result:
        """Set the table name. Invalid names leave the previous name in place."""
        trimmed = name.strip() if isinstance(name, str) else name
        if not is_valid_identifier(trimmed):
            logger.debug(f"Rejected table name {name!r}")
            return Result.failure(FailureReason.INVALID_IDENTIFIER, f"Invalid table name: {name!r}")
        self._name = trimmed
        return Result.success()

    @property
    def schema_name(self) -> Optional[str]:
        return self._schema_name

    def set_schema_name(self, name: str) -> Result:
        trimmed = name.strip() if isinstance(name, str) else name
        if not is_valid_identifier(trimmed):
            return Result.failure(FailureReason.INVALID_IDENTIFIER, f"Invalid schema name: {name!r}")
        self._schema_name = trimmed
        return Result.success()

    @property
    def engine(self) -> str:
        return self._engine

    def set_engine(self, engine: str) -> Result:
        if not is_valid_identifier(engine):
            return Result.failure(FailureReason.INVALID_IDENTIFIER, f"Invalid engine: {engine!r}")
        self._engine = engine
        return Result.success()

    @property
    def charset(self) -> str:
        return self._charset

    def set_charset(self, charset: str) -> Result:
        if not is_valid_identifier(charset):
            return Result.failure(FailureReason.INVALID_IDENTIFIER, f"Invalid charset: {charset!r}")
        self._charset = charset
        return Result.success()

    @property
    def mysql_version(self) -> str:
        return self._mysql_version

    def set_mysql_version(self, version: str) -> Result:
        """Set the server version used to pick the collation ('5.5', '8.0', ...)."""
        if parse_version(version) is None:
            return Result.failure(FailureReason.INVALID_VALUE, f"Invalid MySQL version: {version!r}")
        self._mysql_version = version.strip()
        return Result.success()

    def get_collation(self) -> str:
        """Return the collation for the configured server version.

        Versions up to 5.5 (major <= 5 and minor <= 5) get utf8mb4_unicode_ci,
        everything else utf8mb4_unicode_520_ci.
        """
        major, minor = parse_version(self._mysql_version)
        if major <= 5 and minor <= 5:
            return LEGACY_COLLATION
        return COLLATION

    @property
    def order(self) -> int:
        return self._order

    def set_order(self, order: int) -> Result:
        if isinstance(order, bool) or not isinstance(order, int) or order < 0:
            return Result.failure(FailureReason.INVALID_VALUE, f"Invalid table order: {order!r}")
        self._order = order
        return Result.success()

    @property
    def comment(self) -> Optional[str]:
        return self._comment

    def set_comment(self, comment: Optional[str]) -> None:
        self._comment = comment.strip() if isinstance(comment, str) and comment.strip() else None

    # ------------------------------------------------------------------
    # Columns
    # ------------------------------------------------------------------

    @property
    def columns(self) -> List[Column]:
        return list(self._columns.values())

    def items(self) -> List[Tuple[str, Column]]:
        return list(self._columns.items())

    def column_keys(self) -> List[str]:
        return list(self._columns.keys())

    def column_names(self) -> List[str]:
        return [col.name for col in self._columns.values()]

    def has_column(self, key: str) -> bool:
        return self.get_column(key) is not None

    def get_column(self, key: str) -> Optional[Column]:
        """Return the column stored under key (surrounding spaces ignored)."""
        if not isinstance(key, str):
            return None
        return self._columns.get(key.strip())

    def get_column_by_name(self, name: str) -> Optional[Column]:
        for col in self._columns.values():
            if col.name == name:
                return col
        return None

    def get_column_by_index(self, index: int) -> Optional[Column]:
        for col in self._columns.values():
            if col.index == index:
                return col
        return None

    def get_column_index(self, key: str) -> int:
        col = self.get_column(key)
        return col.index if col is not None else -1

    def get_column_key(self, column: Column) -> Optional[str]:
        for key, col in self._columns.items():
            if col is column:
                return key
        return None

    def add_column(self, key: str, column: Column) -> Result:
        """Add a column under the given key.

        Args:
            key: Column key ([A-Za-z0-9_-], surrounding spaces ignored)
            column: Column instance not yet attached to another table

        Returns:
            Result; on failure the table is left unchanged
        """
        trimmed = key.strip() if isinstance(key, str) else key
        result = self._check_new_column(trimmed, column)
        if not result:
            return result
        column._attach(self, len(self._columns))
        self._columns[trimmed] = column
        return Result.success()

    def _check_new_column(self, key, column) -> Result:
        if not is_valid_key(key):
            return Result.failure(FailureReason.INVALID_KEY, f"Invalid column key: {key!r}")
        if not isinstance(column, Column):
            return Result.failure(FailureReason.NOT_A_COLUMN, f"Not a column: {column!r}")
        if key in self._columns:
            return Result.failure(FailureReason.DUPLICATE_KEY, f"Column key '{key}' already used")
        if self.get_column_by_name(column.name) is not None:
            return Result.failure(
                FailureReason.DUPLICATE_NAME,
                f"Table '{self._name}' already has a column named '{column.name}'"
            )
        if column.owner is not None and column.owner is not self:
            return Result.failure(FailureReason.INVALID_VALUE, f"Column '{column.name}' belongs to another table")
        return Result.success()

    def remove_column(self, key_or_index: Union[str, int]) -> bool:
        """Remove a column by key, falling back to its position index.

        Remaining columns are re-indexed so indices stay contiguous.

        Returns:
            True if a column was removed
        """
        removed_key = None
        if isinstance(key_or_index, str) and key_or_index.strip() in self._columns:
            removed_key = key_or_index.strip()
        elif isinstance(key_or_index, int) and not isinstance(key_or_index, bool):
            for key, col in self._columns.items():
                if col.index == key_or_index:
                    removed_key = key
                    break
        if removed_key is None:
            return False

        self._columns.pop(removed_key)._detach()
        for position, col in enumerate(self._columns.values()):
            col._set_index(position)
        return True

    def add_default_columns(self, options: Union[DefaultColumnsOptions, Dict[str, Any], None] = None) -> Result:
        """Add the standard id, created_on and last_updated columns.

        Either every requested column is added or none is.

        Args:
            options: Which columns to add and how to name them. With no
                argument all three are added. Dict form:
                {'id': {'key-name': 'id', 'db-name': 'id'},
                 'created-on': {}, 'last-updated': {}}.
                Invalid key or db names fall back to the built-in names.

        Returns:
            Result of the first column that cannot be added, or success
        """
        if options is None:
            options = DefaultColumnsOptions.all()
        else:
            options = parse_options(DefaultColumnsOptions, options)

        pending = []
        if options.id is not None:
            col = self._default_column(options.id, 'id', 'int')
            col.set_size(11)
            col.set_primary(True)
            col.set_auto_increment(True)
            pending.append((self._default_key(options.id, 'id'), col))
        if options.created_on is not None:
            col = self._default_column(options.created_on, 'created_on', 'timestamp')
            col.set_default()
            pending.append((self._default_key(options.created_on, 'created-on'), col))
        if options.last_updated is not None:
            col = self._default_column(options.last_updated, 'last_updated', 'datetime')
            col.set_nullable(True)
            col.auto_update()
            pending.append((self._default_key(options.last_updated, 'last-updated'), col))

        keys, names = set(), set()
        for key, col in pending:
            result = self._check_new_column(key, col)
            if result and key in keys:
                result = Result.failure(FailureReason.DUPLICATE_KEY, f"Column key '{key}' requested twice")
            if result and col.name in names:
                result = Result.failure(FailureReason.DUPLICATE_NAME, f"Column name '{col.name}' requested twice")
            if not result:
                logger.warning(f"Default columns not added to '{self._name}': {result.detail}")
                return result
            keys.add(key)
            names.add(col.name)

        for key, col in pending:
            self.add_column(key, col)
        return Result.success()

    @staticmethod
    def _default_key(spec: DefaultColumnSpec, fallback: str) -> str:
        key = spec.key_name.strip() if isinstance(spec.key_name, str) else fallback
        return key if is_valid_key(key) else fallback

    @staticmethod
    def _default_column(spec: DefaultColumnSpec, fallback: str, col_type: str) -> Column:
        db_name = spec.db_name.strip() if isinstance(spec.db_name, str) else fallback
        col = Column(db_name, col_type)
        if col.name != db_name:
            col.set_name(fallback)
        return col

    # ------------------------------------------------------------------
    # Primary key
    # ------------------------------------------------------------------

    @property
    def primary_key_name(self) -> str:
        return f"{self._name}_pk"

    def primary_key_columns_count(self) -> int:
        return sum(1 for col in self._columns.values() if col.is_primary)

    def get_primary_key_columns(self) -> List[Column]:
        return [col for col in self._columns.values() if col.is_primary]

    def primary_key_constraint(self) -> str:
        """Alter statement (without ';') adding the primary key, '' if none."""
        cols = self.get_primary_key_columns()
        if not cols:
            return ''
        col_list = ', '.join(col.name for col in cols)
        return (
            f"alter table {self.get_name()} add constraint {self.primary_key_name} "
            f"primary key ({col_list})"
        )

    def get_create_primary_key_statement(self) -> str:
        """Statement for composite primary keys; '' for zero or one primary column."""
        if self.primary_key_columns_count() <= 1:
            return ''
        return self.primary_key_constraint() + ';'

    # ------------------------------------------------------------------
    # Foreign keys
    # ------------------------------------------------------------------

    @property
    def foreign_keys(self) -> List[ForeignKey]:
        return list(self._foreign_keys)

    def has_foreign_key(self, key_name: str) -> bool:
        return any(fk.key_name == key_name for fk in self._foreign_keys)

    def add_foreign_key(self, key: ForeignKey) -> Result:
        """Attach a fully populated foreign key to this table.

        Every source column must exist on this table and every referenced
        column on the referenced table. On failure nothing is attached.
        """
        if not isinstance(key, ForeignKey):
            return Result.failure(FailureReason.INVALID_VALUE, f"Not a foreign key: {key!r}")
        if self.has_foreign_key(key.key_name):
            return Result.failure(FailureReason.DUPLICATE_KEY, f"Foreign key '{key.key_name}' already exists")
        ref_table = key.referenced_table
        if not isinstance(ref_table, Table):
            return Result.failure(FailureReason.NOT_A_TABLE, "Foreign key has no referenced table")
        source_cols = key.source_columns
        ref_cols = key.referenced_columns
        if not source_cols or len(source_cols) != len(ref_cols):
            return Result.failure(
                FailureReason.LENGTH_MISMATCH,
                f"{len(source_cols)} source columns vs {len(ref_cols)} referenced columns"
            )
        for name in source_cols:
            if self.get_column_by_name(name) is None:
                return Result.failure(FailureReason.NO_SUCH_COLUMN, f"No column '{name}' in '{self._name}'")
        for name in ref_cols:
            if ref_table.get_column_by_name(name) is None:
                return Result.failure(
                    FailureReason.NO_SUCH_COLUMN,
                    f"No column '{name}' in '{ref_table.get_name(False)}'"
                )

        key._set_source_table(self)
        self._foreign_keys.append(key)
        return Result.success()

    def add_reference(
        self,
        ref_table: 'Table',
        ref_col_key: str,
        col_key: str,
        key_name: str,
        on_update: str = 'set null',
        on_delete: str = 'set null'
    ) -> Result:
        """Add a single-column foreign key. See add_multi_reference()."""
        return self.add_multi_reference(ref_table, [ref_col_key], [col_key], key_name, on_update, on_delete)

    def add_multi_reference(
        self,
        ref_table: 'Table',
        ref_col_keys: List[str],
        col_keys: List[str],
        key_name: str,
        on_update: str = 'set null',
        on_delete: str = 'set null'
    ) -> Result:
        """Add a foreign key that may span several columns.

        Args:
            ref_table: Referenced table
            ref_col_keys: Column keys in the referenced table
            col_keys: Column keys in this table, paired by position
            key_name: Constraint name
            on_update: Referential action (set null, cascade, restrict,
                set default, no action); invalid values become 'set null'
            on_delete: Referential action, same rules as on_update

        Returns:
            Result; on failure the table is left unchanged
        """
        if not isinstance(ref_table, Table):
            return Result.failure(FailureReason.NOT_A_TABLE, f"Not a table: {ref_table!r}")
        if not ref_col_keys or len(ref_col_keys) != len(col_keys):
            return Result.failure(FailureReason.LENGTH_MISMATCH, "Column lists must be non-empty and equal in length")

        fk = ForeignKey(referenced_table=ref_table)
        result = fk.set_key_name(key_name)
        if not result:
            return result
        for ref_key in ref_col_keys:
            col = ref_table.get_column(ref_key)
            if col is None:
                return Result.failure(FailureReason.NO_SUCH_COLUMN, f"No column '{ref_key}' in '{ref_table.name}'")
            fk.add_reference_column(col.name)
        for own_key in col_keys:
            col = self.get_column(own_key)
            if col is None:
                return Result.failure(FailureReason.NO_SUCH_COLUMN, f"No column '{own_key}' in '{self._name}'")
            fk.add_source_column(col.name)
        fk.set_on_update(on_update)
        fk.set_on_delete(on_delete)
        return self.add_foreign_key(fk)
