"""
========================================================
Comprehensive pytest suite for utils/database_utils.py
========================================================

Sections:
---------
1. Unit tests - Individual function testing
2. Edge case tests - Boundary conditions
3. Smoke tests - Basic functionality verification

Test Coverage:
--------------
- SqlAlchemyClient: rows as dicts, writes, last_id tracking, error propagation
- get_connection_string: URL building with config defaults and overrides
- check_database_available / wait_for_database / verify_connection

How to Execute:
---------------
All tests:          pytest tests/tests_utils/test_database_utils.py -v
By category:        pytest tests/tests_utils/test_database_utils.py -m unit
With coverage:      pytest tests/tests_utils/test_database_utils.py --cov=utils.database_utils
"""

import threading
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError as SQLAlchemyOperationalError
from sqlalchemy.exc import ProgrammingError

from core.config import config
from utils.database_utils import (
    DatabaseConnectionError,
    SqlAlchemyClient,
    check_database_available,
    get_connection_string,
    verify_connection,
    wait_for_database,
)

# ====================
# Mock Helper Classes
# ====================

class FakeResult:
    """Mock SQLAlchemy CursorResult."""
    def __init__(self, rows=None, lastrowid=None):
        self.rows = rows
        self.lastrowid = lastrowid

    @property
    def returns_rows(self):
        return self.rows is not None

    def mappings(self):
        return iter(self.rows)


class FakeConnection:
    """Mock SQLAlchemy connection recording driver-level statements."""
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.statements = []
        self.options = {}

    def execution_options(self, **options):
        self.options.update(options)
        return self

    def exec_driver_sql(self, statement):
        self.statements.append(statement)
        if self.error:
            raise self.error
        return self.result

    def execute(self, statement):
        self.statements.append(str(statement))
        if self.error:
            raise self.error
        return self.result

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        return False


class FakeEngine:
    """Mock SQLAlchemy engine handing out one connection."""
    def __init__(self, connection):
        self.connection = connection

    def begin(self):
        return self.connection

    def connect(self):
        return self.connection


def _operational_error():
    return SQLAlchemyOperationalError("SELECT 1", {}, Exception("connection refused"))


# ===============
# 1. UNIT TESTS
# ===============

@pytest.mark.unit
def test_query_returns_rows_as_dicts():
    conn = FakeConnection(FakeResult(rows=[{'code': 'EUR'}, {'code': 'GBP'}]))
    client = SqlAlchemyClient(FakeEngine(conn))

    rows = client.query("SELECT `code` FROM `currencies`")

    assert rows == [{'code': 'EUR'}, {'code': 'GBP'}]
    assert all(type(row) is dict for row in rows)
    assert conn.statements == ["SELECT `code` FROM `currencies`"]


@pytest.mark.unit
def test_query_runs_statement_without_parameter_parsing():
    conn = FakeConnection(FakeResult(rows=[]))
    client = SqlAlchemyClient(FakeEngine(conn))

    client.query("SELECT `a` FROM `t` WHERE (`a` = '100%:done')")

    assert conn.options == {'no_parameters': True}
    assert conn.statements == ["SELECT `a` FROM `t` WHERE (`a` = '100%:done')"]


@pytest.mark.unit
def test_insert_records_last_id():
    conn = FakeConnection(FakeResult(lastrowid=42))
    client = SqlAlchemyClient(FakeEngine(conn))

    assert client.last_id() is None
    assert client.query("INSERT INTO `t` (`a`) VALUES (1)") == []
    assert client.last_id() == 42


@pytest.mark.unit
def test_non_insert_write_keeps_last_id():
    conn = FakeConnection(FakeResult(lastrowid=42))
    client = SqlAlchemyClient(FakeEngine(conn))
    client.query("INSERT INTO `t` (`a`) VALUES (1)")

    conn.result = FakeResult(lastrowid=0)
    client.query("DELETE FROM `t` WHERE (`a` = 1)")

    assert client.last_id() == 42


@pytest.mark.unit
def test_get_connection_string_defaults():
    url = get_connection_string()

    assert url.drivername == config.db.driver
    assert url.host == config.db_host
    assert url.port == config.db_port
    assert url.database == config.db_name


@pytest.mark.unit
def test_get_connection_string_overrides():
    url = get_connection_string(host='db.local', port=3307, user='dal', password='p@ss:word', database='geo')

    assert url.host == 'db.local'
    assert url.port == 3307
    assert url.username == 'dal'
    assert url.password == 'p@ss:word'
    assert url.database == 'geo'


@pytest.mark.unit
def test_check_database_available():
    assert check_database_available(FakeEngine(FakeConnection(FakeResult(rows=[])))) is True
    assert check_database_available(FakeEngine(FakeConnection(error=_operational_error()))) is False


@pytest.mark.unit
def test_wait_for_database_retries_then_succeeds():
    with patch('utils.database_utils.check_database_available', side_effect=[False, False, True]), \
            patch('utils.database_utils.time.sleep') as sleep:
        assert wait_for_database(object(), max_retries=5, retry_delay=1) is True

    assert sleep.call_count == 2


@pytest.mark.unit
def test_wait_for_database_raises_after_max_retries():
    with patch('utils.database_utils.check_database_available', return_value=False), \
            patch('utils.database_utils.time.sleep') as sleep:
        with pytest.raises(DatabaseConnectionError):
            wait_for_database(object(), max_retries=3, retry_delay=1)

    assert sleep.call_count == 2


# ===================
# 2. EDGE CASE TESTS
# ===================

@pytest.mark.edge_case
def test_query_errors_propagate():
    error = ProgrammingError("SELECT nope", {}, Exception("syntax error"))
    client = SqlAlchemyClient(FakeEngine(FakeConnection(error=error)))

    with pytest.raises(ProgrammingError):
        client.query("SELECT nope")


@pytest.mark.edge_case
def test_last_id_is_per_thread():
    conn = FakeConnection(FakeResult(lastrowid=7))
    client = SqlAlchemyClient(FakeEngine(conn))
    client.query("INSERT INTO `t` (`a`) VALUES (1)")

    seen = []
    worker = threading.Thread(target=lambda: seen.append(client.last_id()))
    worker.start()
    worker.join()

    assert seen == [None]
    assert client.last_id() == 7


# ================
# 3. SMOKE TESTS
# ================

@pytest.mark.smoke
def test_verify_connection_reports_failure():
    engine = FakeEngine(FakeConnection(error=_operational_error()))
    assert verify_connection(engine) == (False, "Database server not available")
