"""
===================================
Redis-backed cache client adapter.
===================================

Implements the get/set/incr contract VersionedCache expects on top of
redis-py. Query results are pickled so rows read back with the same types
the database driver produced (Decimal, datetime, date, bytes). Raw values
(the per-table version counters) are stored as plain integers so ``INCRBY``
works on them.

Reads tell the two apart by the pickle protocol marker: a pickle payload
always starts with ``\\x80``, an integer counter never does. The redis
client must therefore return bytes (the redis-py default,
``decode_responses=False``).

Only point this client at a redis instance the application trusts; pickle
payloads are executed on load.

Redis errors are logged and re-raised unchanged.

Example:
    >>> from cache.redis_client import RedisCacheClient, create_redis_client
    >>>
    >>> client = RedisCacheClient(create_redis_client())
    >>> client.set('currencies-version', 1, None, {'raw': True})
    >>> client.incr('currencies-version', 1)
    2
"""

import logging
import pickle
from typing import Any, Dict, Optional

import redis
from redis.exceptions import RedisError

from core.config import config

logger = logging.getLogger(__name__)

PICKLE_MARKER = b'\x80'


def create_redis_client(
    host: str = None,
    port: int = None,
    db: int = None,
    password: str = None
) -> redis.Redis:
    """
    Create a redis-py client from config, with optional overrides.

    Args:
        host: Redis hostname (defaults to config.cache.host)
        port: Redis port (defaults to config.cache.port)
        db: Logical database index (defaults to config.cache.db)
        password: Redis password (defaults to config.cache.password)

    Returns:
        redis.Redis instance (connects lazily)
    """
    params = config.cache.get_connection_params()
    if host is not None:
        params['host'] = host
    if port is not None:
        params['port'] = port
    if db is not None:
        params['db'] = db
    if password is not None:
        params['password'] = password
    return redis.Redis(**params)


class RedisCacheClient:
    """Cache client for VersionedCache backed by a redis.Redis connection.

    Attributes:
        redis: Underlying redis-py client
    """

    def __init__(self, redis_client: redis.Redis):
        self.redis = redis_client

    def get(self, key: str) -> Any:
        """Fetch and decode a value; None when the key is absent."""
        try:
            payload = self.redis.get(key)
        except RedisError as e:
            logger.error(f"Redis GET {key} failed: {e}")
            raise

        if payload is None:
            return None
        if isinstance(payload, bytes) and payload.startswith(PICKLE_MARKER):
            try:
                return pickle.loads(payload)
            except (pickle.UnpicklingError, EOFError) as e:
                logger.warning(f"Cached value for {key} could not be unpickled: {e}")
                raise
        return int(payload)

    def set(
        self,
        key: str,
        value: Any,
        ttl: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> bool:
        """
        Store a value.

        Args:
            key: Cache key
            value: Value to store; must be an int when raw
            ttl: Expiry in seconds, None for no expiry
            options: ``{'raw': True}`` stores a plain integer counter

        Returns:
            True when redis acknowledged the write
        """
        raw = bool(options and options.get('raw'))
        if raw:
            payload = str(int(value))
        else:
            payload = pickle.dumps(value, protocol=pickle.HIGHEST_PROTOCOL)
        try:
            return bool(self.redis.set(key, payload, ex=ttl))
        except RedisError as e:
            logger.error(f"Redis SET {key} failed: {e}")
            raise

    def incr(self, key: str, delta: int, ttl: Optional[int] = None) -> int:
        """
        Atomically increment a raw counter.

        Args:
            key: Counter key
            delta: Amount to add
            ttl: Optional expiry refreshed after the increment

        Returns:
            The counter value after the increment
        """
        try:
            value = self.redis.incrby(key, delta)
            if ttl:
                self.redis.expire(key, ttl)
        except RedisError as e:
            logger.error(f"Redis INCRBY {key} failed: {e}")
            raise
        return int(value)
