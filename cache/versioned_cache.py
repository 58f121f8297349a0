"""
==============================================
Versioned cache-aside reads for the DAL.
==============================================

Every table has a version counter stored in the cache under
``<table>-version``. Query results are cached under a key hashed from the
SQL text plus the current version of every table the query reads, so
invalidating a table is a single counter bump: old entries are never
deleted, they simply stop being addressed and age out of the cache.

Version protocol:
    - table_version: read the counter, creating it at 1 when absent
    - expire_table: increment the counter, creating it at 1 when absent

Counters are written in raw mode so the cache server's increment command
can operate on them; query results use the client's normal serialization.

Concurrency:
    Two callers racing on an absent counter may both create it at 1, in
    which case one invalidation is absorbed. A read racing a write may cache
    rows under the old version; the next read after the bump misses. No
    locking is done here beyond the atomicity of the cache's increment.

Example:
    >>> from cache.versioned_cache import VersionedCache
    >>>
    >>> cache = VersionedCache(cache_client, service_prefix='geoservice')
    >>> rows = cache.cached_query(
    ...     "SELECT `code` FROM `currencies`",
    ...     ['currencies'],
    ...     sql_client.query
    ... )
    >>> cache.expire_table('currencies')   # next identical read hits the database
"""

import hashlib
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol

from core.config import config
from core.logger import truncate_sql

logger = logging.getLogger(__name__)

RAW_OPTIONS = {'raw': True}

# Default for default_ttl: take DAL_CACHE_TTL from config. None means no expiry.
CONFIG_TTL = object()


class CacheClient(Protocol):
    """Operations the DAL needs from a key/value cache."""

    def get(self, key: str) -> Any:
        """Return the stored value, or None when absent."""
        ...

    def set(self, key: str, value: Any, ttl: Optional[int] = None,
            options: Optional[Dict[str, Any]] = None) -> Any:
        """Store a value; ``options={'raw': True}`` stores a plain counter."""
        ...

    def incr(self, key: str, delta: int, ttl: Optional[int] = None) -> Any:
        """Atomically add ``delta`` to a raw counter."""
        ...


def version_key(table_name: str) -> str:
    """Cache key of a table's version counter."""
    return f"{table_name}-version"


class VersionedCache:
    """Per-table version counters and cache-aside query execution.

    Attributes:
        client: Injected cache client (see CacheClient)
        service_prefix: Prefix of every query-result key
        default_ttl: TTL passed when storing query results, None for no expiry
    """

    def __init__(
        self,
        client: CacheClient,
        service_prefix: Optional[str] = None,
        default_ttl: Any = CONFIG_TTL
    ):
        """Wrap a cache client.

        Args:
            client: Object providing get/set/incr
            service_prefix: Query key prefix (defaults to config.service_prefix)
            default_ttl: Result TTL in seconds, None for no expiry (defaults to
                config.cache_ttl)
        """
        self.client = client
        self.service_prefix = service_prefix if service_prefix is not None else config.service_prefix
        self.default_ttl = config.cache_ttl if default_ttl is CONFIG_TTL else default_ttl

    def table_version(self, table_name: str) -> int:
        """Get a table's version, creating the counter at 1 when absent.

        Args:
            table_name: Table whose version is read

        Returns:
            Current version number
        """
        key = version_key(table_name)
        version = self.client.get(key)
        if version is None:
            self.client.set(key, 1, None, RAW_OPTIONS)
            logger.debug(f"Initialized {key} at 1")
            return 1
        return int(version)

    def expire_table(self, table_name: str) -> None:
        """Invalidate every cached query reading a table.

        The first expiry after a cold start only establishes version 1;
        later expiries increment the counter.
        """
        key = version_key(table_name)
        if self.client.get(key) is None:
            self.client.set(key, 1, None, RAW_OPTIONS)
            logger.debug(f"Initialized {key} at 1 on expiry")
        else:
            self.client.incr(key, 1, None)
            logger.debug(f"Bumped {key}")

    def expire_tables(self, table_names: Iterable[str]) -> None:
        """Expire each table in turn; duplicates are expired twice."""
        for table_name in table_names:
            self.expire_table(table_name)

    def query_key(self, sql: str, related_tables: Optional[List[str]]) -> str:
        """Build the cache key of a query.

        Args:
            sql: Statement text
            related_tables: Tables the statement reads, in key order

        Returns:
            ``<prefix>-<md5 hex>`` of ``sql:<t1>-<v1><t2>-<v2>...``, or of the
            bare SQL when no tables are given
        """
        if related_tables:
            versions = "".join(
                f"{table}-{self.table_version(table)}" for table in related_tables
            )
            material = f"{sql}:{versions}"
        else:
            material = sql
        digest = hashlib.md5(material.encode('utf-8')).hexdigest()
        return f"{self.service_prefix}-{digest}"

    def cached_query(
        self,
        sql: str,
        related_tables: Optional[List[str]],
        executor: Callable[[str], Iterable[Dict[str, Any]]]
    ) -> List[Dict[str, Any]]:
        """Return rows for ``sql`` from the cache, or run it and cache the rows.

        Args:
            sql: Statement text
            related_tables: Tables whose versions scope the cache entry
            executor: Called with ``sql`` on a miss; returns the rows

        Returns:
            Result rows; empty results are cached as well
        """
        key = self.query_key(sql, related_tables)
        cached = self.client.get(key)
        if cached is not None:
            logger.debug(f"Cache hit {key}: {truncate_sql(sql)}")
            return cached

        logger.debug(f"Cache miss {key}: {truncate_sql(sql)}")
        rows = list(executor(sql))
        if self.default_ttl is None:
            self.client.set(key, rows)
        else:
            self.client.set(key, rows, self.default_ttl)
        return rows
