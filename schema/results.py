"""
=====================================================
Validation results and identifier rules for the model.
=====================================================

Setters on Column, ForeignKey and Table do not raise on expected misuse
(bad names, duplicates, missing columns). They return a Result instead,
which is truthy on success and falsy on failure, and carries the reason
so callers and tests can tell failures apart.

Example:
    >>> from schema.results import FailureReason
    >>> result = table.set_name('bad name')
    >>> if not result:
    ...     assert result.reason is FailureReason.INVALID_IDENTIFIER
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

IDENTIFIER_PATTERN = re.compile(r'[A-Za-z0-9_]+')
KEY_PATTERN = re.compile(r'[A-Za-z0-9_-]*[A-Za-z0-9][A-Za-z0-9_-]*')


class FailureReason(Enum):
    """Why a model mutation was refused."""

    INVALID_IDENTIFIER = 'invalid_identifier'
    INVALID_KEY = 'invalid_key'
    DUPLICATE_NAME = 'duplicate_name'
    DUPLICATE_KEY = 'duplicate_key'
    NOT_A_COLUMN = 'not_a_column'
    NOT_A_TABLE = 'not_a_table'
    NO_SUCH_COLUMN = 'no_such_column'
    LENGTH_MISMATCH = 'length_mismatch'
    TYPE_MISMATCH = 'type_mismatch'
    INVALID_VALUE = 'invalid_value'
    NO_LINKED_TABLE = 'no_linked_table'


@dataclass(frozen=True)
class Result:
    """Outcome of a validating operation.

    Attributes:
        ok: True when the operation was applied
        reason: FailureReason when ok is False
        detail: Human-readable explanation of the failure
    """

    ok: bool
    reason: Optional[FailureReason] = None
    detail: str = ''

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls) -> 'Result':
        return cls(True)

    @classmethod
    def failure(cls, reason: FailureReason, detail: str = '') -> 'Result':
        return cls(False, reason, detail)


def is_valid_identifier(name) -> bool:
    """Check that name is a non-empty string of [A-Za-z0-9_]."""
    return isinstance(name, str) and IDENTIFIER_PATTERN.fullmatch(name) is not None


def is_valid_key(key) -> bool:
    """Check a column key: [A-Za-z0-9_-] with at least one letter or digit."""
    return isinstance(key, str) and KEY_PATTERN.fullmatch(key) is not None


COMPARATORS = ('=', '!=', '<', '<=', '>', '>=')
JOIN_OPERATORS = ('and', 'or')


def normalize_comparator(comparator) -> str:
    """Return a supported comparison operator, '=' for anything else."""
    if isinstance(comparator, str) and comparator.strip() in COMPARATORS:
        return comparator.strip()
    return '='


def normalize_join_operator(operator) -> str:
    """Return 'and' or 'or'; anything else becomes 'and'."""
    if isinstance(operator, str) and operator.strip().lower() in JOIN_OPERATORS:
        return operator.strip().lower()
    return 'and'
