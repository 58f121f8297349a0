"""
==========================
Relation Join Statements.
==========================

Builds the SELECT used to fetch related rows for a table and lists the
tables each relation reads, so cached relation queries are keyed on every
participating table's version.

Aliases are fixed: ``a`` is always the related table; for direct relations
``b`` is this table, for through relations ``b`` is the link table and
``c`` is this table. Every relation query also selects this table's join key
as ``_table_key`` so result rows can be grouped back onto their owners.

Functions:
- get_relation_tables: Tables read by one relation
- get_all_related_tables: Sorted union over every relation plus the table itself
- get_relation_query_sql: Two- or three-way join for one relation

Usage:
    from sql.relations import get_relation_query_sql

    rel = HasMany(table='cats', table_key='house_id', this_key='id',
                  table_fields='cat_id,name')
    get_relation_query_sql(rel, {"colour": "ginger"}, 'houses')
    # "SELECT `a`.`cat_id`,`a`.`name`,`b`.`id` AS `_table_key` FROM `cats` AS `a`,
    #  `houses` AS `b` WHERE (`a`.`house_id` = `b`.`id`) AND (`b`.`colour` = 'ginger')"
"""

from typing import Any, List, Mapping, Optional

from models.metadata import HasMany, HasManyThrough, HasOne, QueryMetadata, Relation

from .escaping import quote_identifier
from .query_builder import build_select_fields, build_where

RELATION_KEY_ALIAS = '_table_key'


def _unique(names: List[str]) -> List[str]:
    seen = []
    for name in names:
        if name not in seen:
            seen.append(name)
    return seen


def get_relation_tables(relation: Relation, this_table: str) -> List[str]:
    """
    List the tables a relation query reads.

    Args:
        relation: Relation definition
        this_table: Name of the table owning the relation

    Returns:
        ``[related, this]`` for direct relations and ``[this, link, related]``
        for through relations, without duplicates
    """
    if isinstance(relation, HasManyThrough):
        return _unique([this_table, relation.link_table, relation.table])
    if isinstance(relation, (HasOne, HasMany)):
        return _unique([relation.table, this_table])
    raise TypeError(f"Unknown relation type: {type(relation).__name__}")


def get_all_related_tables(metadata: QueryMetadata) -> List[str]:
    """
    List every table a query with any includes could read.

    Args:
        metadata: Table metadata

    Returns:
        Sorted, de-duplicated table names including the table itself
    """
    tables = {metadata.table_name}
    for relation in metadata.relations.values():
        tables.update(get_relation_tables(relation, metadata.table_name))
    return sorted(tables)


def _relation_select(relation: Relation, owner_alias: str) -> str:
    fields = build_select_fields(relation.field_list, 'a')
    key = f"{quote_identifier(relation.this_key, owner_alias)} AS {quote_identifier(RELATION_KEY_ALIAS)}"
    return f"SELECT {fields},{key}"


def get_relation_query_sql(
    relation: Relation,
    query: Optional[Mapping[Any, Any]],
    this_table: str
) -> str:
    """
    Build the join fetching related rows for the rows matching ``query``.

    Args:
        relation: Relation definition
        query: Filter on this table's columns; include/exclude are ignored
        this_table: Name of the table owning the relation

    Returns:
        SQL SELECT statement
    """
    if isinstance(relation, HasManyThrough):
        owner_alias = 'c'
        sql = (
            f"{_relation_select(relation, owner_alias)}"
            f" FROM {quote_identifier(relation.table)} AS `a`,"
            f" {quote_identifier(relation.link_table)} AS `b`,"
            f" {quote_identifier(this_table)} AS `c`"
            f" WHERE ({quote_identifier(relation.table_key, 'a')} = {quote_identifier(relation.link_field, 'b')}"
            f" AND {quote_identifier(relation.link_key, 'b')} = {quote_identifier(relation.this_key, 'c')})"
        )
    elif isinstance(relation, (HasOne, HasMany)):
        owner_alias = 'b'
        sql = (
            f"{_relation_select(relation, owner_alias)}"
            f" FROM {quote_identifier(relation.table)} AS `a`,"
            f" {quote_identifier(this_table)} AS `b`"
            f" WHERE ({quote_identifier(relation.table_key, 'a')} = {quote_identifier(relation.this_key, 'b')})"
        )
    else:
        raise TypeError(f"Unknown relation type: {type(relation).__name__}")

    where = build_where(query or {}, owner_alias)
    if where:
        sql += f" AND {where}"
    return sql
