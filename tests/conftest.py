"""
Shared pytest configuration and fixtures for all tests.

Key fixtures:
- fake_cache: in-memory cache client recording every call
- fake_sql: SQL client recording statements, returning no rows
- make_cache / make_sql: factories for pre-loaded fakes
"""

import sys
from pathlib import Path

import pytest

# Add project root to sys.path to enable importing project modules
# This allows tests to import from 'core', 'sql', 'cache', 'dal', etc. without installation
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


def pytest_configure(config):
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: Unit tests - isolated function-level tests")
    config.addinivalue_line("markers", "integration: Integration tests - component interactions")
    config.addinivalue_line("markers", "smoke: Smoke tests - basic functionality checks")
    config.addinivalue_line("markers", "edge_case: Edge case tests - boundary conditions")


class FakeCache:
    """In-memory cache client with the get/set/incr contract."""

    def __init__(self, initial=None):
        self.store = dict(initial or {})
        self.calls = []

    def get(self, key):
        self.calls.append(('get', key))
        return self.store.get(key)

    def set(self, key, value, ttl=None, options=None):
        self.calls.append(('set', key, value, ttl, options))
        self.store[key] = value
        return True

    def incr(self, key, delta, ttl=None):
        self.calls.append(('incr', key, delta, ttl))
        self.store[key] = int(self.store[key]) + delta
        return self.store[key]

    def call_names(self):
        return [call[0] for call in self.calls]


class FakeSqlClient:
    """SQL client returning queued results in order and recording statements."""

    def __init__(self, results=None, last_insert_id=None):
        self.results = list(results or [])
        self.statements = []
        self.last_insert_id = last_insert_id

    def query(self, sql):
        self.statements.append(sql)
        if self.results:
            return self.results.pop(0)
        return []

    def last_id(self):
        return self.last_insert_id


@pytest.fixture
def fake_cache():
    """Provide an empty in-memory cache client."""
    return FakeCache()


@pytest.fixture
def fake_sql():
    """Provide a SQL client with no queued results."""
    return FakeSqlClient()


@pytest.fixture
def make_cache():
    """Factory for caches pre-populated with given keys."""
    def factory(initial=None):
        return FakeCache(initial)

    return factory


@pytest.fixture
def make_sql():
    """Factory for SQL clients returning the given result lists in order."""
    def factory(*results, last_insert_id=None):
        return FakeSqlClient(list(results), last_insert_id=last_insert_id)

    return factory
