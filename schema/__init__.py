"""
========================================
In-memory table model for MySQL builders
========================================

Describes tables, columns, foreign keys and joins without touching a
database. The sql package reads these objects to produce statements.

Modules:
    results: Result / FailureReason and the identifier rules
    column: Column definition and type rules
    foreign_key: Referential constraint description
    table: Keyed column collection with storage options
    join_table: Merged column set of two tables plus the join condition

Architecture:
    - schema never imports from sql
    - Mutators return a Result instead of raising on bad input
    - A column refers to its table through a weak reference

Example:
    >>> from schema import Column, Table
    >>>
    >>> users = Table('users')
    >>> users.add_default_columns()
    >>> users.add_column('name', Column('name', 'varchar', 64))
"""

__version__ = "0.1.0"
__all__ = [
    # Results
    'Result',
    'FailureReason',
    # Model
    'Column',
    'ForeignKey',
    'Table',
    'DefaultColumnSpec',
    'DefaultColumnsOptions',
    # Joins
    'JoinTable',
    'JoinTableFactory',
    'JoinConditionResult',
]

from .column import Column
from .foreign_key import ForeignKey
from .join_table import JoinConditionResult, JoinTable, JoinTableFactory
from .results import FailureReason, Result
from .table import DefaultColumnSpec, DefaultColumnsOptions, Table
