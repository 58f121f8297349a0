"""
=========================
Query and Record Checks.
=========================

Boolean validators run before any SQL is built. They never raise for bad
input; callers decide what a False means (the DAL facade refuses writes).

Functions:
- valid_query: Query keys are fields, includes are relations, excludes are fields
- valid_insert: Known fields, required fields present, strings within length
- valid_update: As valid_insert, but partial records are allowed
"""

import logging
from typing import Any, Mapping, Optional

from models.metadata import QueryMetadata

from .escaping import identifier_text
from .query_builder import get_excludes, get_includes, is_reserved_key

logger = logging.getLogger(__name__)


def _key_name(key: Any) -> Optional[str]:
    try:
        return identifier_text(key)
    except TypeError:
        return None


def valid_query(query: Optional[Mapping[Any, Any]], metadata: QueryMetadata) -> bool:
    """
    Check a query map against table metadata.

    Data keys must be fields. Every ``include`` name must be a relation and
    every ``exclude`` name must be a field, so relations can be included but
    never excluded. An included relation's ``this_key`` cannot be excluded,
    since its rows are joined back on that field.

    Args:
        query: Query map, None is invalid
        metadata: Table metadata

    Returns:
        True if the query can be rendered
    """
    if query is None:
        return False

    for key in query:
        if is_reserved_key(key):
            continue
        if _key_name(key) not in metadata.fields:
            logger.debug(f"Unknown query field {key!r} for {metadata.table_name}")
            return False

    if any(name not in metadata.relations for name in get_includes(query)):
        return False

    excludes = get_excludes(query)
    if any(name not in metadata.fields for name in excludes):
        return False

    for name in get_includes(query):
        this_key = metadata.relations[name].this_key
        if this_key in excludes:
            logger.debug(
                f"Include {name!r} needs {metadata.table_name}.{this_key}, which is excluded"
            )
            return False

    return True


def _valid_record(data: Optional[Mapping[Any, Any]], metadata: QueryMetadata, check_required: bool) -> bool:
    if not data:
        return False

    names = {}
    for key, value in data.items():
        name = _key_name(key)
        if name not in metadata.fields:
            logger.debug(f"Unknown field {key!r} for {metadata.table_name}")
            return False
        names[name] = value

    if check_required:
        missing = [
            name for name, definition in metadata.fields.items()
            if definition.required and name not in names
        ]
        if missing:
            logger.debug(f"Missing required fields for {metadata.table_name}: {missing}")
            return False

    for name, value in names.items():
        definition = metadata.fields[name]
        if definition.length is None or not isinstance(value, str):
            continue
        if len(value) > definition.length:
            logger.debug(
                f"Value for {metadata.table_name}.{name} exceeds length {definition.length}"
            )
            return False

    return True


def valid_insert(data: Optional[Mapping[Any, Any]], metadata: QueryMetadata) -> bool:
    """
    Check a record before INSERT.

    Args:
        data: Column name to value
        metadata: Table metadata

    Returns:
        False when data is None or empty, names an unknown field, misses a
        required field, or holds a string longer than its field's length
    """
    return _valid_record(data, metadata, check_required=True)


def valid_update(data: Optional[Mapping[Any, Any]], metadata: QueryMetadata) -> bool:
    """Check a partial record before UPDATE; like valid_insert without the required check."""
    return _valid_record(data, metadata, check_required=False)
