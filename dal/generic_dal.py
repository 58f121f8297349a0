"""
==============================
Generic data-access facade.
==============================

GenericDal serves one table described by a QueryMetadata. Reads go through
the versioned cache: the SELECT text plus the versions of every table it
could read form the cache key. Writes go straight to the SQL client, then
bump the table's version so every cached read of it misses next time.

Reads:
    get_all_by_query / get_one / get_by_primary_key / get_all
    exists_by_primary_key
    Requested ``include`` relations are fetched with one join per relation
    and attached to each record under the relation name.

Writes:
    insert / update_by_primary_key / delete_by_primary_key
    Records failing valid_insert/valid_update are refused (None returned,
    nothing executed).

Callers are expected to check ``valid_query`` before issuing reads; the
facade renders whatever query it is given.

Example:
    >>> from dal.generic_dal import GenericDal
    >>> from cache.redis_client import RedisCacheClient, create_redis_client
    >>> from utils.database_utils import SqlAlchemyClient, create_sqlalchemy_engine
    >>>
    >>> currencies = GenericDal(
    ...     SqlAlchemyClient(create_sqlalchemy_engine()),
    ...     RedisCacheClient(create_redis_client()),
    ...     metadata
    ... )
    >>> query = {'code': 'EUR', 'include': 'countries'}
    >>> if currencies.valid_query(query):
    ...     euro = currencies.get_one(query)
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from cache.versioned_cache import CONFIG_TTL, CacheClient, VersionedCache
from models.metadata import HasOne, QueryMetadata, Relation
from sql.query_builder import (
    build_fields,
    build_where,
    count_builder,
    delete_builder,
    get_excludes,
    get_includes,
    insert_builder,
    is_reserved_key,
    select_builder,
    update_builder,
)
from sql.relations import (
    RELATION_KEY_ALIAS,
    get_all_related_tables,
    get_relation_query_sql,
    get_relation_tables,
)
from sql.validation import valid_insert, valid_query, valid_update
from utils.database_utils import SqlClient

from .relation_resolver import add_field_from_map, map_of_arrays_by_key, remove_key_from_array_groups

Record = Dict[str, Any]


class GenericDal:
    """Cached reads and cache-invalidating writes for one table.

    Attributes:
        sql: Injected SQL client (query / last_id)
        cache: VersionedCache wrapping the injected cache client
        metadata: Table description
        log: Logger used for SQL and refused writes
    """

    def __init__(
        self,
        sql_client: SqlClient,
        cache_client: CacheClient,
        metadata: QueryMetadata,
        log: Optional[logging.Logger] = None,
        service_prefix: Optional[str] = None,
        cache_ttl: Any = CONFIG_TTL
    ):
        """Wire the DAL to its collaborators.

        Args:
            sql_client: Object providing query(sql) and last_id()
            cache_client: Object providing get/set/incr
            metadata: Table description
            log: Logger (defaults to this module's logger)
            service_prefix: Query cache key prefix (defaults to config)
            cache_ttl: Query result TTL in seconds, None for no expiry
                (defaults to config)
        """
        self.sql = sql_client
        self.cache = VersionedCache(cache_client, service_prefix, cache_ttl)
        self.metadata = metadata
        self.log = log or logging.getLogger(__name__)

    @property
    def table_name(self) -> str:
        return self.metadata.table_name

    @property
    def primary_key(self) -> str:
        return self.metadata.primary_key

    # ── VALIDATION ────────────────────────────────────────

    def valid_query(self, query: Optional[Mapping[str, Any]]) -> bool:
        return valid_query(query, self.metadata)

    def valid_insert(self, data: Optional[Mapping[str, Any]]) -> bool:
        return valid_insert(data, self.metadata)

    def valid_update(self, data: Optional[Mapping[str, Any]]) -> bool:
        return valid_update(data, self.metadata)

    # ── CACHE ─────────────────────────────────────────────

    def get_all_related_tables(self) -> List[str]:
        """Sorted tables any read of this table may touch, itself included."""
        return get_all_related_tables(self.metadata)

    def get_relation_tables(self, relation: Relation) -> List[str]:
        return get_relation_tables(relation, self.table_name)

    def get_relation_query_sql(self, relation: Relation, query: Optional[Mapping[str, Any]]) -> str:
        return get_relation_query_sql(relation, query, self.table_name)

    def cached_query(self, sql: str, related_tables: Optional[List[str]] = None) -> List[Record]:
        """
        Run a SELECT through the versioned cache.

        Args:
            sql: Statement text
            related_tables: Tables scoping the cache entry (defaults to this table)

        Returns:
            Result rows
        """
        tables = related_tables or [self.table_name]
        return self.cache.cached_query(sql, tables, self.sql.query)

    def expire_table_cache(self, table_names: Optional[List[str]] = None) -> None:
        """Invalidate cached reads of the given tables (defaults to this table)."""
        self.cache.expire_tables(table_names or [self.table_name])

    # ── READ ──────────────────────────────────────────────

    def get_all_by_query(self, query: Mapping[str, Any]) -> List[Record]:
        """
        Fetch every record matching a query.

        Args:
            query: Field filters plus optional ``include``/``exclude`` lists

        Returns:
            Matching records, with included relations attached
        """
        sql = select_builder(
            self.table_name,
            build_fields(query, self.metadata),
            build_where(query)
        )
        records = self.cached_query(sql, self.get_all_related_tables())

        if get_includes(query):
            # cached rows stay unmodified
            records = [dict(record) for record in records]
            self.add_relations(records, query)
        return records

    def get_one(self, query: Mapping[str, Any]) -> Optional[Record]:
        """First record matching a query, or None."""
        records = self.get_all_by_query(query)
        return records[0] if records else None

    def get_all(self) -> List[Record]:
        return self.get_all_by_query({})

    def get_by_primary_key(self, value: Any) -> Optional[Record]:
        return self.get_one({self.primary_key: value})

    def exists_by_primary_key(self, value: Any) -> bool:
        """
        Check whether a primary key value exists.

        Args:
            value: Primary key value

        Returns:
            True iff the COUNT(*) is not 0
        """
        sql = count_builder(self.table_name, build_where({self.primary_key: value}))
        rows = self.cached_query(sql)
        if not rows:
            return False
        return int(rows[0]['c']) != 0

    # ── RELATIONS ─────────────────────────────────────────

    def add_relations(self, records: List[Record], query: Mapping[str, Any]) -> None:
        """
        Attach every included relation to ``records``, in place.

        Each record gains a field named after the relation: a list of related
        rows for has-many relations, a single row (or None) for has-one.

        Args:
            records: Records returned for ``query``
            query: The query that produced them
        """
        filters = {key: value for key, value in query.items() if not is_reserved_key(key)}
        excludes = get_excludes(query)

        for name in get_includes(query):
            relation = self.metadata.relations[name]
            if relation.this_key in excludes:
                self.log.debug(f"Skipping include {name!r}: {relation.this_key!r} is excluded")
                continue
            sql = self.get_relation_query_sql(relation, filters)
            rows = [dict(row) for row in self.cached_query(sql, self.get_relation_tables(relation))]

            groups = map_of_arrays_by_key(rows, RELATION_KEY_ALIAS)
            remove_key_from_array_groups(groups, RELATION_KEY_ALIAS)

            has_one = isinstance(relation, HasOne)
            if has_one:
                lookup = {key: group[0] for key, group in groups.items()}
            else:
                lookup = groups

            add_field_from_map(records, lookup, name, relation.this_key)
            for record in records:
                if relation.this_key in record and name not in record:
                    record[name] = None if has_one else []

    # ── WRITE ─────────────────────────────────────────────

    def insert(self, data: Mapping[str, Any]) -> Optional[Record]:
        """
        Insert a record and return it as stored.

        Args:
            data: Column name to value

        Returns:
            The re-fetched record, or None when data is invalid or the new
            primary key cannot be determined
        """
        if not self.valid_insert(data):
            self.log.warning(f"Refusing invalid insert into {self.table_name}")
            return None

        sql = insert_builder(self.table_name, data)
        self.log.debug(sql)
        self.sql.query(sql)
        self.cache.expire_table(self.table_name)

        if self.primary_key in data:
            key = data[self.primary_key]
        else:
            key = self.sql.last_id()
        if key is None:
            self.log.warning(f"No primary key available after insert into {self.table_name}")
            return None
        return self.get_by_primary_key(key)

    def update_by_primary_key(self, primary_key: Any, data: Mapping[str, Any]) -> Optional[Record]:
        """
        Update one record and return it as stored.

        Args:
            primary_key: Primary key value of the record
            data: Columns to change

        Returns:
            The re-fetched record, or None when data is invalid
        """
        if not self.valid_update(data):
            self.log.warning(f"Refusing invalid update of {self.table_name} {primary_key!r}")
            return None

        sql = update_builder(self.table_name, data, build_where({self.primary_key: primary_key}))
        self.log.debug(sql)
        self.sql.query(sql)
        self.cache.expire_table(self.table_name)

        return self.get_by_primary_key(data.get(self.primary_key, primary_key))

    def delete_by_primary_key(self, primary_key: Any) -> None:
        """Delete one record by primary key."""
        sql = delete_builder(self.table_name, build_where({self.primary_key: primary_key}))
        self.log.debug(sql)
        self.sql.query(sql)
        self.cache.expire_table(self.table_name)
