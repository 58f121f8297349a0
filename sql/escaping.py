"""
=========================
SQL Escaping Utilities.
=========================

Pure functions turning raw identifiers and values into literals that are
safe to splice into MySQL-style SQL text.

Identifiers and values are handled differently:
- Identifiers have every backtick removed (not escaped) and are then
  wrapped in backticks, so a field name can never close its own quoting.
- String values have backslashes and single quotes backslash-escaped and are
  wrapped in single quotes. Backticks inside values are left alone.

Only None, int, float and str (plus Enum members, rendered by their value)
are accepted as values. Anything else raises UnsupportedTypeError rather
than being stringified.

Usage:
    from sql.escaping import escape_scalar, equality_clause, quote_identifier

    quote_identifier("on`=1; DROP TABLE countries")
    # '`on=1; DROP TABLE countries`'

    equality_clause("two'; DROP TABLE countries;")
    # "= 'two\\'; DROP TABLE countries;'"
"""

import math
from enum import Enum
from typing import Any, Optional


class UnsupportedTypeError(TypeError):
    """Raised when a value outside None/int/float/str reaches the escaper."""
    pass


def identifier_text(name: Any) -> str:
    """
    Get the text of a field or table name.

    Args:
        name: A str, or an Enum member whose value is used

    Returns:
        The raw (unescaped) name text
    """
    if isinstance(name, Enum):
        name = name.value
    if isinstance(name, str):
        return str(name)
    raise UnsupportedTypeError(f"Unsupported identifier type: {type(name).__name__}")


def escape_identifier(name: Any) -> str:
    """
    Remove backticks from an identifier.

    Args:
        name: Column or table name

    Returns:
        The name without any backtick characters
    """
    return identifier_text(name).replace('`', '')


def quote_identifier(name: Any, namespace: Optional[str] = None) -> str:
    """
    Escape and backtick-quote an identifier, optionally prefixed by a table alias.

    Args:
        name: Column or table name
        namespace: Optional table alias

    Returns:
        `` `name` `` or `` `ns`.`name` ``
    """
    quoted = f"`{escape_identifier(name)}`"
    if namespace:
        return f"`{escape_identifier(namespace)}`.{quoted}"
    return quoted


def escape_string_literal(value: str) -> str:
    """Backslash-escape backslashes, then single quotes, in a string value."""
    return value.replace('\\', '\\\\').replace("'", "\\'")


def escape_str_field(value: Any) -> str:
    """
    Escape a string or Enum member for use in either position.

    Backticks are removed; backslashes and single quotes are backslash-escaped.

    Args:
        value: A str or Enum member

    Returns:
        Escaped text without surrounding quotes
    """
    return escape_string_literal(escape_identifier(value))


def escape_scalar(value: Any) -> str:
    """
    Render a scalar as a SQL literal.

    Args:
        value: None, int, float, str or Enum member

    Returns:
        ``NULL``, the decimal text of a number, or a single-quoted string

    Raises:
        UnsupportedTypeError: For bools, non-finite floats and any other type
    """
    if isinstance(value, Enum):
        value = value.value

    if value is None:
        return 'NULL'
    if isinstance(value, bool):
        raise UnsupportedTypeError("Unsupported value type: bool")
    if isinstance(value, int):
        return str(int(value))
    if isinstance(value, float):
        if not math.isfinite(value):
            raise UnsupportedTypeError(f"Unsupported float value: {value!r}")
        return repr(float(value))
    if isinstance(value, str):
        return f"'{escape_string_literal(str(value))}'"

    raise UnsupportedTypeError(f"Unsupported value type: {type(value).__name__}")


def equality_clause(value: Any) -> str:
    """
    Build the operator half of an equality predicate.

    Args:
        value: Scalar to compare against

    Returns:
        ``IS NULL`` for None, otherwise ``= <literal>``
    """
    if value is None:
        return 'IS NULL'
    return f"= {escape_scalar(value)}"
