"""
============================
SQL Query Builder Utilities.
============================

This module provides the building blocks the DAL uses to turn a query map
or a record into SQL text. Every value passes through sql.escaping; nothing
here talks to a database.

Fragment Builders:
- build_where: Parenthesized equality predicates joined by AND
- build_select_fields: Backtick-quoted, comma-joined column list
- build_fields: Table columns minus the query's ``exclude`` list
- build_insert: ``(cols) VALUES (vals)`` fragment
- build_update: ``col = val, ...`` fragment
- get_includes / get_excludes: Split the reserved ``include``/``exclude`` keys

Statement Builders:
- select_builder: ``SELECT ... FROM ... [WHERE ...]``
- count_builder: ``SELECT COUNT(*) AS `c` FROM ... [WHERE ...]``
- insert_builder: ``INSERT INTO ...``
- update_builder: ``UPDATE ... SET ... WHERE ...``
- delete_builder: ``DELETE FROM ... WHERE ...``

Usage:
    from sql.query_builder import build_where, select_builder

    where = build_where({"one": "two", "three": None})
    # "(`one` = 'two') AND (`three` IS NULL)"

    sql = select_builder('test_table', '`one`,`two`', where)
    # "SELECT `one`,`two` FROM `test_table` WHERE (`one` = 'two') AND (`three` IS NULL)"
"""

from typing import Any, List, Mapping, Optional

from models.metadata import QueryMetadata

from .escaping import equality_clause, escape_scalar, identifier_text, quote_identifier

INCLUDE_KEY = 'include'
EXCLUDE_KEY = 'exclude'
RESERVED_KEYS = (INCLUDE_KEY, EXCLUDE_KEY)


def is_reserved_key(key: Any) -> bool:
    """True for the ``include``/``exclude`` keys, which never become predicates."""
    try:
        return identifier_text(key) in RESERVED_KEYS
    except TypeError:
        return False


def _split_names(value: Optional[str]) -> List[str]:
    if value is None:
        return []
    return [name for name in str(value).split(',') if name != '']


def build_where(query: Mapping[Any, Any], namespace: Optional[str] = None) -> str:
    """
    Build WHERE conditions from a query map.

    Args:
        query: Field name to value; None means IS NULL
        namespace: Optional table alias prefixed to every field

    Returns:
        Conditions without the WHERE keyword, or "" for an empty query
    """
    conditions = [
        f"({quote_identifier(field, namespace)} {equality_clause(value)})"
        for field, value in query.items()
        if not is_reserved_key(field)
    ]
    return " AND ".join(conditions)


def build_select_fields(field_names: List[str], namespace: Optional[str] = None) -> str:
    """
    Build a column list.

    Args:
        field_names: Ordered column names
        namespace: Optional table alias

    Returns:
        Comma-joined quoted names with no spaces, "" when empty
    """
    return ",".join(quote_identifier(name, namespace) for name in field_names)


def get_includes(query: Optional[Mapping[str, Any]]) -> List[str]:
    """Relation names listed in ``query['include']``."""
    if query is None:
        return []
    return _split_names(query.get(INCLUDE_KEY))


def get_excludes(query: Optional[Mapping[str, Any]]) -> List[str]:
    """Field names listed in ``query['exclude']``."""
    if query is None:
        return []
    return _split_names(query.get(EXCLUDE_KEY))


def build_fields(
    query: Optional[Mapping[str, Any]],
    metadata: QueryMetadata,
    namespace: Optional[str] = None
) -> str:
    """
    Build the SELECT column list for a query.

    Args:
        query: Query map; only its ``exclude`` key is used
        metadata: Table metadata supplying the column order
        namespace: Optional table alias

    Returns:
        Every metadata field not excluded, in metadata order
    """
    excludes = set(get_excludes(query))
    return build_select_fields(
        [name for name in metadata.fields if name not in excludes],
        namespace
    )


def build_insert(data: Mapping[Any, Any]) -> str:
    """
    Build the column and VALUES part of an INSERT.

    Args:
        data: Column name to value, in insertion order

    Returns:
        ``(`c1`, `c2`) VALUES (v1, v2)``
    """
    columns = ", ".join(quote_identifier(name) for name in data)
    values = ", ".join(escape_scalar(value) for value in data.values())
    return f"({columns}) VALUES ({values})"


def build_update(data: Mapping[Any, Any]) -> str:
    """
    Build the SET list of an UPDATE.

    Args:
        data: Column name to new value, in insertion order

    Returns:
        Assignments such as "`c1` = v1, `c2` = v2"
    """
    return ", ".join(
        f"{quote_identifier(name)} = {escape_scalar(value)}"
        for name, value in data.items()
    )


def select_builder(table: str, fields_sql: str, where_sql: str = "") -> str:
    """
    Build a single-table SELECT statement.

    Args:
        table: Table name
        fields_sql: Column list from build_fields/build_select_fields
        where_sql: Conditions from build_where; omitted when empty

    Returns:
        SQL SELECT statement
    """
    sql = f"SELECT {fields_sql} FROM {quote_identifier(table)}"
    if where_sql:
        sql += f" WHERE {where_sql}"
    return sql


def count_builder(table: str, where_sql: str = "", alias: str = "c") -> str:
    """
    Build a ``SELECT COUNT(*)`` statement.

    Args:
        table: Table name
        where_sql: Conditions from build_where; omitted when empty
        alias: Name of the count column

    Returns:
        SQL COUNT statement
    """
    return select_builder(table, f"COUNT(*) AS {quote_identifier(alias)}", where_sql)


def insert_builder(table: str, data: Mapping[Any, Any]) -> str:
    """Build an INSERT statement for one record."""
    return f"INSERT INTO {quote_identifier(table)} {build_insert(data)}"


def update_builder(table: str, data: Mapping[Any, Any], where_sql: str) -> str:
    """
    Build an UPDATE statement.

    Args:
        table: Table name
        data: Columns to set
        where_sql: Conditions from build_where; required so an UPDATE never
            touches the whole table

    Returns:
        SQL UPDATE statement

    Raises:
        ValueError: If where_sql is empty
    """
    if not where_sql:
        raise ValueError("UPDATE requires a WHERE clause")
    return f"UPDATE {quote_identifier(table)} SET {build_update(data)} WHERE {where_sql}"


def delete_builder(table: str, where_sql: str) -> str:
    """
    Build a DELETE statement.

    Raises:
        ValueError: If where_sql is empty
    """
    if not where_sql:
        raise ValueError("DELETE requires a WHERE clause")
    return f"DELETE FROM {quote_identifier(table)} WHERE {where_sql}"
