"""
==========================
Cache package for the DAL.
==========================

Modules:
    versioned_cache: Per-table version counters and cache-aside reads
    redis_client: redis-py adapter implementing the cache client contract

Example:
    >>> from cache import VersionedCache, RedisCacheClient, create_redis_client
    >>>
    >>> cache = VersionedCache(RedisCacheClient(create_redis_client()))
    >>> cache.table_version('currencies')
    1
"""

__version__ = "0.1.0"
__all__ = [
    'CONFIG_TTL', 'CacheClient', 'VersionedCache', 'version_key',
    'RedisCacheClient', 'create_redis_client',
]

from .redis_client import RedisCacheClient, create_redis_client
from .versioned_cache import CONFIG_TTL, CacheClient, VersionedCache, version_key
