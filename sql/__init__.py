"""
=========================================
SQL construction package for the DAL.
=========================================

Pure functions turning table metadata, query maps and records into
MySQL-style SQL text. Nothing here executes SQL.

The package follows a clear organization:
    - escaping.py: identifier and value escaping (the only place literals are made)
    - query_builder.py: WHERE/SELECT/INSERT/UPDATE fragments and statements
    - validation.py: boolean checks of queries and records against metadata
    - relations.py: relation join statements and related-table listing

Architecture:
    - relations.py and validation.py import from query_builder.py (not vice versa)
    - query_builder.py imports from escaping.py and models only
    - All SQL generation is pure functions (no side effects)

Example:
    >>> from sql import build_where, select_builder, valid_query
    >>>
    >>> where = build_where({'code': 'EUR'})
    >>> select_builder('currencies', '`code`,`name`', where)
    "SELECT `code`,`name` FROM `currencies` WHERE (`code` = 'EUR')"
"""

__version__ = "0.1.0"
__all__ = [
    # Escaping
    'UnsupportedTypeError', 'escape_identifier', 'escape_string_literal',
    'escape_str_field', 'escape_scalar', 'equality_clause', 'quote_identifier',
    # Fragments and statements
    'build_where', 'build_select_fields', 'build_fields', 'build_insert',
    'build_update', 'get_includes', 'get_excludes', 'select_builder',
    'count_builder', 'insert_builder', 'update_builder', 'delete_builder',
    # Validation
    'valid_query', 'valid_insert', 'valid_update',
    # Relations
    'RELATION_KEY_ALIAS', 'get_relation_tables', 'get_all_related_tables',
    'get_relation_query_sql',
]

from .escaping import (
    UnsupportedTypeError,
    equality_clause,
    escape_identifier,
    escape_scalar,
    escape_str_field,
    escape_string_literal,
    quote_identifier,
)
from .query_builder import (
    build_fields,
    build_insert,
    build_select_fields,
    build_update,
    build_where,
    count_builder,
    delete_builder,
    get_excludes,
    get_includes,
    insert_builder,
    select_builder,
    update_builder,
)
from .relations import (
    RELATION_KEY_ALIAS,
    get_all_related_tables,
    get_relation_query_sql,
    get_relation_tables,
)
from .validation import valid_insert, valid_query, valid_update
