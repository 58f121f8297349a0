"""
==========================
Utility Functions Package.
==========================

Database connectivity for the DAL: the SQLAlchemy-backed SQL client and
engine helpers used by the host application at start-up.

Modules:
    database_utils: SQL client adapter, engine creation and health checks
"""

__version__ = "1.0.0"
__all__ = [
    'DatabaseConnectionError',
    'SqlClient',
    'SqlAlchemyClient',
    'get_connection_string',
    'create_sqlalchemy_engine',
    'check_database_available',
    'wait_for_database',
    'verify_connection'
]

from .database_utils import (
    DatabaseConnectionError,
    SqlAlchemyClient,
    SqlClient,
    check_database_available,
    create_sqlalchemy_engine,
    get_connection_string,
    verify_connection,
    wait_for_database,
)
