"""
===================================
Typed option structures for builders.
===================================

Operations that take many optional settings (select, select_count,
add_default_columns) describe them with a dataclass. Callers may pass the
dataclass directly or a plain dict; dict keys may use the hyphenated
spelling ('select-max', 'key-name') and are converted here. Unknown keys are
rejected rather than ignored.

Example:
    >>> from core.options import parse_options
    >>> opts = parse_options(SelectOptions, {'limit': 10, 'order-by': ['name']})
"""

from dataclasses import fields
from typing import Any, Dict, Mapping, Optional


class UnknownOptionError(ValueError):
    """Exception raised when an options mapping contains an unrecognized key."""
    pass


def parse_options(cls, options: Any, aliases: Optional[Dict[str, str]] = None):
    """Build an options dataclass from None, an instance, or a mapping.

    Args:
        cls: Dataclass type to build
        options: None (all defaults), an instance of cls, or a mapping
        aliases: Optional mapping of legacy key names to field names

    Returns:
        Instance of cls

    Raises:
        UnknownOptionError: If the mapping contains a key cls does not define
        TypeError: If options is neither None, cls nor a mapping
    """
    if options is None:
        return cls()
    if isinstance(options, cls):
        return options
    if not isinstance(options, Mapping):
        raise TypeError(f"{cls.__name__} expects a mapping, got {type(options).__name__}")

    known = {f.name for f in fields(cls)}
    aliases = aliases or {}
    kwargs = {}
    for raw_key, value in options.items():
        key = aliases.get(raw_key, raw_key)
        if isinstance(key, str):
            key = key.strip().replace('-', '_')
        if key not in known:
            raise UnknownOptionError(f"Unknown option '{raw_key}' for {cls.__name__}")
        kwargs[key] = value
    return cls(**kwargs)
