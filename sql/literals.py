"""
==========================================
Type-aware SQL literal formatting (MySQL).
==========================================

Turns Python values into the literal text placed in insert/update/where
clauses, based on the type of the target column.

Formatting rules:
    - None or the exact string 'null' -> null
    - varchar/text/mediumtext/datetime/timestamp -> quoted, escaped
    - decimal/float/double -> quoted, escaped (kept exact, no float rounding)
    - tinyblob/blob/mediumblob/longblob -> the value is a file path; the
      file's bytes are inlined as a quoted, slash-escaped literal. Missing or
      unreadable files become null.
    - bool -> 1 / 0
    - anything else -> str(value)

Example:
    >>> from sql.literals import escape_mysql_special_chars, format_value
    >>> escape_mysql_special_chars("O'Brien")
    "O\\\\'Brien"
    >>> format_value(name_col, "O'Brien").literal
    "'O\\\\'Brien'"
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from schema.column import Column

logger = logging.getLogger(__name__)

NULL = 'null'


@dataclass(frozen=True)
class FormattedValue:
    """A literal ready to be placed in a statement.

    Attributes:
        literal: SQL text of the value
        is_blob: True when file content was inlined
    """

    literal: str
    is_blob: bool = False


def escape_mysql_special_chars(value: Any) -> str:
    """Escape backslashes and single quotes for a MySQL string literal."""
    text = '' if value is None else str(value)
    return text.replace('\\', '\\\\').replace("'", "\\'")


def add_slashes(text: str) -> str:
    """Escape backslash, single quote, double quote and NUL with a backslash."""
    return (
        text.replace('\\', '\\\\')
        .replace("'", "\\'")
        .replace('"', '\\"')
        .replace('\x00', '\\0')
    )


def quote(value: Any) -> str:
    return f"'{escape_mysql_special_chars(value)}'"


def is_null(value: Any) -> bool:
    """Only None and the exact text 'null' mean SQL null."""
    return value is None or (isinstance(value, str) and value == NULL)


def read_blob_literal(path: Any) -> Optional[str]:
    """Read a file and return its content as a quoted literal.

    Backslashes in the path are treated as separators. Bytes are mapped
    one-to-one onto characters (latin-1) so binary content survives escaping.

    Args:
        path: Path of the file to inline

    Returns:
        Quoted literal, or None when the file is missing or unreadable
    """
    fixed = Path(str(path).replace('\\', '/'))
    try:
        content = fixed.read_bytes()
    except OSError as e:
        logger.warning(f"Cannot read blob file '{fixed}': {e}")
        return None
    logger.debug(f"Inlined {len(content)} bytes from '{fixed}'")
    return f"'{add_slashes(content.decode('latin-1'))}'"


def format_value(column: Column, value: Any) -> FormattedValue:
    """Format a value for insertion into the given column.

    Args:
        column: Target column, its type picks the formatting rule
        value: Python value (or file path for blob columns)

    Returns:
        FormattedValue with the literal and the blob flag
    """
    if is_null(value):
        return FormattedValue(NULL)
    if column.is_text() or column.is_date() or column.is_decimal():
        return FormattedValue(quote(value))
    if column.is_blob():
        literal = read_blob_literal(value)
        if literal is None:
            return FormattedValue(NULL)
        return FormattedValue(literal, is_blob=True)
    if isinstance(value, bool):
        return FormattedValue('1' if value else '0')
    return FormattedValue(str(value))
