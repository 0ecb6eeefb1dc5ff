"""
Shared test fixtures.
"""

import os
import sys
from pathlib import Path

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Settings are read at import time
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

import pytest
from contextlib import ExitStack
from unittest.mock import patch
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Generator

# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data or []
        self.count = count if count is not None else len(self.data)


class MockSupabaseQuery:
    """Mock Supabase query builder with chainable methods."""

    def __init__(self, data: list = None, count: int = None, error: Exception = None, on_insert=None):
        self._data = data or []
        self._count = count
        self._error = error
        self._on_insert = on_insert
        self._is_single = False

    def select(self, *args, **kwargs):
        return self

    def insert(self, data):
        # Simulate insert - add id and timestamps
        if isinstance(data, dict):
            data = [data]
        if self._on_insert is not None:
            self._on_insert([dict(item) for item in data])
        for item in data:
            item.setdefault("id", "test-uuid-123")
            item["created_at"] = datetime.now(timezone.utc).isoformat()
        self._data = data
        return self

    def eq(self, column, value):
        # Filter only on columns the rows actually carry
        self._data = [row for row in self._data if column not in row or row[column] == value]
        return self

    def in_(self, column, values):
        self._data = [row for row in self._data if column not in row or row[column] in values]
        return self

    def single(self):
        self._is_single = True
        return self

    def order(self, column, **kwargs):
        return self

    def limit(self, count):
        self._data = self._data[:count]
        return self

    def execute(self) -> MockSupabaseResponse:
        if self._error is not None:
            raise self._error
        if self._is_single:
            # Return first item or empty for single()
            data = self._data[0] if self._data else None
            return MockSupabaseResponse(
                data=data,
                count=1 if data else 0
            )
        return MockSupabaseResponse(
            data=self._data,
            count=self._count if self._count is not None else len(self._data)
        )


class MockSupabaseTable:
    """Mock Supabase table with configurable responses."""

    def __init__(self, data: list = None, count: int = None, error: Exception = None, on_insert=None):
        self._data = data or []
        self._count = count
        self._error = error
        self._on_insert = on_insert

    def _query(self) -> MockSupabaseQuery:
        return MockSupabaseQuery(list(self._data), self._count, self._error, self._on_insert)

    def select(self, *args, **kwargs):
        return self._query()

    def insert(self, data):
        return self._query().insert(data)


class MockStorageBucket:
    def __init__(self, files: dict):
        self._files = files

    def download(self, path: str) -> bytes:
        if path not in self._files:
            raise Exception(f"Object not found: {path}")
        return self._files[path]


class MockStorage:
    def __init__(self):
        self.files: dict[str, dict[str, bytes]] = {}
        self.download_count = 0

    def from_(self, bucket: str) -> MockStorageBucket:
        self.download_count += 1
        return MockStorageBucket(self.files.get(bucket, {}))


class MockAuth:
    def __init__(self):
        self.users: dict[str, SimpleNamespace] = {}

    def get_user(self, token: str):
        if token not in self.users:
            raise Exception("invalid JWT")
        return SimpleNamespace(user=self.users[token])


class MockSupabaseClient:
    """Mock Supabase client."""

    def __init__(self):
        self._tables = {}
        self.inserted: dict[str, list[list[dict]]] = {}
        self.storage = MockStorage()
        self.auth = MockAuth()

    def set_table_data(self, table_name: str, data: list, count: int = None):
        """Configure mock data for a table."""
        self._tables[table_name] = {"data": data, "count": count, "error": None}

    def set_table_error(self, table_name: str, error: Exception):
        """Make every query on a table raise `error`."""
        self._tables[table_name] = {"data": [], "count": None, "error": error}

    def set_storage_file(self, bucket: str, path: str, content: bytes):
        self.storage.files.setdefault(bucket, {})[path] = content

    def set_user(self, token: str, user_id: str, email: str = None):
        self.auth.users[token] = SimpleNamespace(id=user_id, email=email)

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        config = self._tables.get(name, {"data": [], "count": None, "error": None})

        def record(rows):
            self.inserted.setdefault(name, []).append(rows)

        return MockSupabaseTable(config["data"], config["count"], config["error"], on_insert=record)


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("orders", [
                OrderRowFactory.create(...)
            ])
    """
    return MockSupabaseClient()


_PATCHED_CLIENT_GETTERS = [
    "config.database.get_supabase_client",
    "services.order_export_service.get_supabase_client",
    "services.export_history_service.get_supabase_client",
    "services.auth_service.get_supabase_client",
    "services.auth_service.get_admin_client",
    "services.logo_service.get_supabase_client",
    "services.logo_service.get_admin_client",
]

_SINGLETON_MODULES = [
    "services.order_export_service",
    "services.export_history_service",
    "services.workbook_service",
    "services.auth_service",
]


def _reset_singletons():
    import importlib
    for name in _SINGLETON_MODULES:
        importlib.import_module(name)._service = None


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock.

    Usage:
        def test_something(mock_db, mock_supabase):
            mock_supabase.set_table_data("orders", [...])
            # Now any code using get_supabase_client() gets the mock
    """
    _reset_singletons()
    with ExitStack() as stack:
        for target in _PATCHED_CLIENT_GETTERS:
            stack.enter_context(patch(target, return_value=mock_supabase))
        yield mock_supabase
    _reset_singletons()


@pytest.fixture
def sample_exporter():
    from models.order_export import ExporterIdentity
    return ExporterIdentity(user_id="user-1", email="buyer@example.com", role="buyer")


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client_with_mock_db(mock_db):
    """
    Create FastAPI test client with mocked database.

    The lifespan doesn't run, so exports draw the logo placeholder.

    Usage:
        def test_endpoint(test_client_with_mock_db, mock_supabase):
            mock_supabase.set_table_data("orders", [...])
            response = test_client_with_mock_db.post("/api/order-export", ...)
    """
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)
