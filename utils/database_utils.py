"""
==================================================
Database connectivity utilities for the DAL.
==================================================

Provides the SQLAlchemy-backed SQL client handed to GenericDal, plus engine
construction and availability checks for the host application's startup.

The DAL only needs ``query(sql)`` and ``last_id()`` from its SQL client.
SqlAlchemyClient runs the already-escaped statement text verbatim through
``exec_driver_sql`` with ``no_parameters=True``, so ``%`` and ``:`` inside
string literals are never mistaken for bind markers.

Key Features:
    - Engine construction from config (MySQL via PyMySQL by default)
    - SqlAlchemyClient: rows as dicts, per-thread last inserted id
    - Database availability checking and startup wait

Example:
    >>> from utils.database_utils import SqlAlchemyClient, create_sqlalchemy_engine
    >>>
    >>> client = SqlAlchemyClient(create_sqlalchemy_engine())
    >>> client.query("SELECT `code` FROM `currencies` WHERE (`code` = 'EUR')")
    [{'code': 'EUR'}]
"""

import logging
import threading
import time
from typing import Any, Dict, List, Optional, Protocol, Tuple

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import OperationalError as SQLAlchemyOperationalError
from sqlalchemy.exc import SQLAlchemyError

from core.config import config
from core.logger import truncate_sql

logger = logging.getLogger(__name__)


class DatabaseConnectionError(Exception):
    """Exception raised when the database never becomes available."""
    pass


class SqlClient(Protocol):
    """Operations the DAL needs from a SQL client."""

    def query(self, sql: str) -> List[Dict[str, Any]]:
        """Execute a statement; return its rows (empty for writes)."""
        ...

    def last_id(self) -> Optional[int]:
        """Id generated by the most recent INSERT on this client."""
        ...


class SqlAlchemyClient:
    """SQL client for GenericDal backed by a SQLAlchemy Engine.

    Each call runs in its own transaction (``engine.begin()``), committed on
    success and rolled back on error. Errors propagate unchanged.

    Attributes:
        engine: SQLAlchemy Engine used for every statement
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self._local = threading.local()

    def query(self, sql: str) -> List[Dict[str, Any]]:
        """
        Execute a statement.

        Args:
            sql: Complete, already-escaped statement text

        Returns:
            Rows as dicts in column order; empty list for statements
            returning no rows
        """
        logger.debug(f"Executing: {truncate_sql(sql)}")
        try:
            with self.engine.begin() as conn:
                result = conn.execution_options(no_parameters=True).exec_driver_sql(sql)
                if result.returns_rows:
                    return [dict(row) for row in result.mappings()]
                if sql.lstrip().upper().startswith('INSERT'):
                    self._local.last_id = result.lastrowid
                return []
        except SQLAlchemyError as e:
            logger.error(f"Statement failed: {truncate_sql(sql)}: {e}")
            raise

    def last_id(self) -> Optional[int]:
        """Id generated by this thread's most recent INSERT, None if none yet."""
        return getattr(self._local, 'last_id', None)


def get_connection_string(
    host: str = None,
    port: int = None,
    user: str = None,
    password: str = None,
    database: str = None
) -> URL:
    """
    Build the database URL.

    Args:
        host: Database hostname (defaults to config.db_host)
        port: Database port (defaults to config.db_port)
        user: Database user (defaults to config.db_user)
        password: Database password (defaults to config.db_password)
        database: Database name (defaults to config.db_name)

    Returns:
        SQLAlchemy URL (password escaping handled by URL.create)
    """
    return URL.create(
        drivername=config.db.driver,
        username=user if user is not None else config.db_user,
        password=password if password is not None else config.db_password,
        host=host if host is not None else config.db_host,
        port=port if port is not None else config.db_port,
        database=database if database is not None else config.db_name
    )


def create_sqlalchemy_engine(
    host: str = None,
    port: int = None,
    user: str = None,
    password: str = None,
    database: str = None,
    echo: bool = False,
    pool_size: int = 5,
    max_overflow: int = 10
) -> Engine:
    """
    Create SQLAlchemy engine with connection pooling.

    Args:
        host: Database hostname
        port: Database port
        user: Database user
        password: Database password
        database: Database name
        echo: Enable SQL statement logging
        pool_size: Connection pool size
        max_overflow: Maximum overflow connections

    Returns:
        Configured SQLAlchemy Engine
    """
    return create_engine(
        get_connection_string(host, port, user, password, database),
        echo=echo,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_pre_ping=True  # Verify connections before using
    )


def check_database_available(engine: Engine) -> bool:
    """
    Check that the database answers ``SELECT 1``.

    Args:
        engine: Engine to check

    Returns:
        True if database is available, False otherwise
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyOperationalError as e:
        logger.debug(f"Database not available: {e}")
        return False


def wait_for_database(
    engine: Engine,
    max_retries: int = 10,
    retry_delay: float = 2
) -> bool:
    """
    Block host start-up until the database answers.

    Args:
        engine: Engine to check
        max_retries: Maximum number of attempts
        retry_delay: Delay between attempts in seconds

    Returns:
        True once the database is available

    Raises:
        DatabaseConnectionError: If database never becomes available
    """
    for attempt in range(1, max_retries + 1):
        if check_database_available(engine):
            logger.info(f"Database is available (attempt {attempt}/{max_retries})")
            return True

        if attempt < max_retries:
            logger.warning(
                f"Database not available yet (attempt {attempt}/{max_retries}), "
                f"retrying in {retry_delay}s..."
            )
            time.sleep(retry_delay)

    error_msg = f"Database did not become available after {max_retries} attempts"
    logger.error(error_msg)
    raise DatabaseConnectionError(error_msg)


def verify_connection(engine: Engine) -> Tuple[bool, Optional[str]]:
    """
    Verify database connection and return status with details.

    Returns:
        Tuple of (success: bool, message: str)
    """
    if check_database_available(engine):
        return True, f"Connected to {engine.url.render_as_string(hide_password=True)}"
    return False, "Database server not available"
