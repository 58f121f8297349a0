"""
=============================================
Configuration management for the generic DAL.
=============================================

Loads all configuration from environment variables (.env file) and provides
a centralized Config singleton for application-wide access.

Three groups of settings are exposed:
- Database: where the SQL client connects (MySQL dialect)
- Cache: where the cache client connects (redis)
- DAL: cache key prefix, optional result TTL and log level

Example:
    >>> from core.config import config
    >>>
    >>> # Database settings
    >>> print(f"MySQL at {config.db_host}:{config.db_port}/{config.db_name}")
    >>>
    >>> # Cache key namespace
    >>> print(f"Prefix: {config.service_prefix}, TTL: {config.cache_ttl}")
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(dotenv_path=env_path)


def _optional_int(value: Optional[str]) -> Optional[int]:
    """Convert an environment string to int, treating blanks as unset."""
    if value is None or value.strip() == '':
        return None
    return int(value)


@dataclass
class DatabaseConfig:
    """Database configuration settings.

    Attributes:
        host: MySQL server hostname or IP address
        port: MySQL server port number
        user: Database username
        password: Database password
        database: Schema the DAL reads and writes
        driver: SQLAlchemy driver name
    """

    host: str
    port: int
    user: str
    password: str
    database: str
    driver: str = 'mysql+pymysql'


@dataclass
class CacheConfig:
    """Cache server configuration settings.

    Attributes:
        host: Redis server hostname
        port: Redis server port
        db: Redis logical database index
        password: Optional Redis password
    """

    host: str
    port: int
    db: int
    password: Optional[str] = None

    def get_connection_params(self) -> dict:
        """Get keyword arguments for redis.Redis()."""
        return {
            'host': self.host,
            'port': self.port,
            'db': self.db,
            'password': self.password
        }


@dataclass
class DalConfig:
    """Settings for the data-access layer itself.

    Attributes:
        service_prefix: Prefix of every query-result cache key
        cache_ttl: Seconds to keep query results, None for no expiry
        log_level: Default logging level
    """

    service_prefix: str
    cache_ttl: Optional[int]
    log_level: str


class Config:
    """Centralized configuration manager.

    Provides access to all configuration settings loaded from environment
    variables (.env file).

    Attributes:
        db: DatabaseConfig instance with database connection settings
        cache: CacheConfig instance with cache connection settings
        dal: DalConfig instance with cache key and logging settings

    Example:
        >>> config = Config()
        >>> print(config.db_host, config.cache_host)
        >>> print(f"Caching under {config.service_prefix}-*")
    """

    def __init__(self):
        """Initialize configuration from environment variables."""
        self.db = DatabaseConfig(
            host=os.getenv('MYSQL_HOST', 'localhost'),
            port=int(os.getenv('MYSQL_PORT', '3306')),
            user=os.getenv('MYSQL_USER', 'root'),
            password=os.getenv('MYSQL_PASSWORD', ''),
            database=os.getenv('MYSQL_DB', 'app'),
            driver=os.getenv('MYSQL_DRIVER', 'mysql+pymysql')
        )

        self.cache = CacheConfig(
            host=os.getenv('REDIS_HOST', 'localhost'),
            port=int(os.getenv('REDIS_PORT', '6379')),
            db=int(os.getenv('REDIS_DB', '0')),
            password=os.getenv('REDIS_PASSWORD') or None
        )

        self.dal = DalConfig(
            service_prefix=os.getenv('DAL_SERVICE_PREFIX', 'geoservice'),
            cache_ttl=_optional_int(os.getenv('DAL_CACHE_TTL')),
            log_level=os.getenv('LOG_LEVEL', 'INFO')
        )

    @property
    def db_host(self) -> str:
        """Get database server hostname."""
        return self.db.host

    @property
    def db_port(self) -> int:
        """Get database server port number."""
        return self.db.port

    @property
    def db_user(self) -> str:
        """Get database username."""
        return self.db.user

    @property
    def db_password(self) -> str:
        """Get database password."""
        return self.db.password

    @property
    def db_name(self) -> str:
        """Get database name."""
        return self.db.database

    @property
    def cache_host(self) -> str:
        """Get cache server hostname."""
        return self.cache.host

    @property
    def cache_port(self) -> int:
        """Get cache server port."""
        return self.cache.port

    @property
    def service_prefix(self) -> str:
        """Get the query-result cache key prefix."""
        return self.dal.service_prefix

    @property
    def cache_ttl(self) -> Optional[int]:
        """Get the query-result TTL in seconds (None means no expiry)."""
        return self.dal.cache_ttl

    @property
    def log_level(self) -> str:
        return self.dal.log_level


# Global configuration instance
config = Config()
