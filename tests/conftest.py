"""
Shared test fixtures.
"""

import os
import sys
from pathlib import Path

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Settings load at import time and require these
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

import pytest
from unittest.mock import patch
from datetime import datetime
from typing import Generator

# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data=None, count: int = None):
        self.data = data if data is not None else []
        self.count = count


class MockSupabaseQuery:
    """
    Chainable query builder over the mock client's in-memory rows.

    Filters apply to select, update and delete; nothing touches the
    rows until execute().
    """

    def __init__(self, client, table_name: str, operation: str = "select", payload=None, on_conflict: str = ""):
        self._client = client
        self._table = table_name
        self._operation = operation
        self._payload = payload
        self._on_conflict = on_conflict
        self._filters = []
        self._order = None
        self._limit = None
        self._count = None
        self._is_single = False

    def select(self, *args, **kwargs):
        self._count = kwargs.get("count")
        return self

    def eq(self, column, value):
        self._filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column, value):
        self._filters.append(lambda row: row.get(column) != value)
        return self

    def in_(self, column, values):
        values = list(values)
        self._filters.append(lambda row: row.get(column) in values)
        return self

    def order(self, column, desc: bool = False, **kwargs):
        self._order = (column, desc)
        return self

    def limit(self, count):
        self._limit = count
        return self

    def single(self):
        self._is_single = True
        return self

    def _matches(self, row: dict) -> bool:
        return all(check(row) for check in self._filters)

    def execute(self) -> MockSupabaseResponse:
        self._client._record(self._table, self._operation)
        rows = self._client._tables.setdefault(self._table, [])

        if self._operation == "select":
            result = [dict(row) for row in rows if self._matches(row)]
            if self._order:
                column, desc = self._order
                result.sort(key=lambda row: str(row.get(column) or ""), reverse=desc)
            if self._limit is not None:
                result = result[:self._limit]
        elif self._operation == "insert":
            result = [self._client._insert_row(self._table, item) for item in _as_list(self._payload)]
        elif self._operation == "upsert":
            result = [self._upsert_row(rows, item) for item in _as_list(self._payload)]
        elif self._operation == "update":
            result = []
            for row in rows:
                if self._matches(row):
                    row.update(self._payload)
                    result.append(dict(row))
        elif self._operation == "delete":
            result = [dict(row) for row in rows if self._matches(row)]
            rows[:] = [row for row in rows if not self._matches(row)]
        else:
            raise ValueError(f"Unknown operation {self._operation}")

        if self._is_single:
            return MockSupabaseResponse(data=result[0] if result else None, count=len(result))
        return MockSupabaseResponse(data=result, count=len(result) if self._count else None)

    def _upsert_row(self, rows: list, item: dict) -> dict:
        keys = [k.strip() for k in self._on_conflict.split(",") if k.strip()] or ["id"]
        for row in rows:
            if all(row.get(k) == item.get(k) for k in keys):
                row.update(item)
                return dict(row)
        return self._client._insert_row(self._table, item)


def _as_list(payload) -> list:
    return payload if isinstance(payload, list) else [payload]


class MockSupabaseTable:
    """Entry point for one table, mirroring client.table(name)."""

    def __init__(self, client, name: str):
        self._client = client
        self._name = name

    def select(self, *args, **kwargs):
        return MockSupabaseQuery(self._client, self._name).select(*args, **kwargs)

    def insert(self, data):
        return MockSupabaseQuery(self._client, self._name, "insert", data)

    def upsert(self, data, on_conflict: str = "", **kwargs):
        return MockSupabaseQuery(self._client, self._name, "upsert", data, on_conflict)

    def update(self, data):
        return MockSupabaseQuery(self._client, self._name, "update", data)

    def delete(self):
        return MockSupabaseQuery(self._client, self._name, "delete")


class MockSupabaseClient:
    """
    Mock Supabase client backed by in-memory tables.

    Every executed operation is recorded in `operations` as
    (table, operation). `fail_on` makes one operation raise.
    """

    def __init__(self):
        self._tables = {}
        self._failures = {}
        self._next_id = 0
        self.operations = []

    def set_table_data(self, table_name: str, data: list, count: int = None):
        """Configure mock data for a table."""
        self._tables[table_name] = [dict(row) for row in data]

    def get_table_data(self, table_name: str) -> list:
        return [dict(row) for row in self._tables.get(table_name, [])]

    def fail_on(self, table_name: str, operation: str, message: str = "storage unavailable"):
        """Make the next matching operation raise."""
        self._failures[(table_name, operation)] = message

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        return MockSupabaseTable(self, name)

    def _record(self, table_name: str, operation: str):
        message = self._failures.pop((table_name, operation), None)
        if message is not None:
            raise RuntimeError(message)
        self.operations.append((table_name, operation))

    def _insert_row(self, table_name: str, item: dict) -> dict:
        self._next_id += 1
        row = dict(item)
        row.setdefault("id", f"{table_name}-{self._next_id}")
        row.setdefault("created_at", datetime.utcnow().isoformat() + "Z")
        self._tables.setdefault(table_name, []).append(row)
        return dict(row)


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("items", [
                {"id": "item-1", "name": "Widget A", ...}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock.

    Usage:
        def test_something(mock_db, mock_supabase):
            mock_supabase.set_table_data("items", [...])
            # Services created inside the test get the mock
    """
    with patch("config.database.get_supabase_client", return_value=mock_supabase):
        with patch("services.catalog_service.get_supabase_client", return_value=mock_supabase):
            with patch("services.alias_service.get_supabase_client", return_value=mock_supabase):
                with patch("services.order_service.get_supabase_client", return_value=mock_supabase):
                    yield mock_supabase


@pytest.fixture
def tenant_id() -> str:
    return "tenant-1"


@pytest.fixture
def sample_catalog_rows(tenant_id) -> list:
    """Three active items and one inactive item."""
    return [
        {
            "id": "item-1",
            "tenant_id": tenant_id,
            "name": "Widget A",
            "barcode": "0001234",
            "sku": "WA-1",
            "wholesale_price": 5.00,
            "tax_rate": 10,
            "status": "active",
            "unit": "each",
        },
        {
            "id": "item-2",
            "tenant_id": tenant_id,
            "name": "Gadget Large",
            "barcode": "998877",
            "sku": "GL-2",
            "wholesale_price": 12.50,
            "tax_rate": 0,
            "status": "active",
            "unit": "box",
        },
        {
            "id": "item-3",
            "tenant_id": tenant_id,
            "name": "Sprocket",
            "barcode": None,
            "sku": "SP-3",
            "wholesale_price": 2.00,
            "tax_rate": None,
            "status": "active",
            "unit": None,
        },
        {
            "id": "item-4",
            "tenant_id": tenant_id,
            "name": "Retired Widget",
            "barcode": "555",
            "sku": "RW-4",
            "wholesale_price": 1.00,
            "tax_rate": 10,
            "status": "inactive",
            "unit": "each",
        },
    ]


@pytest.fixture
def sample_customer_rows(tenant_id) -> list:
    return [
        {
            "id": "cust-1",
            "tenant_id": tenant_id,
            "email": "buyer@acme.test",
            "business_name": "Acme Co",
            "contact_name": "Jane Doe",
            "full_name": "Jane Q Doe",
            "role": "customer",
        },
        {
            "id": "cust-2",
            "tenant_id": tenant_id,
            "email": "ops@bolt.test",
            "business_name": "Bolt Supplies",
            "contact_name": None,
            "full_name": "Sam Smith",
            "role": "customer",
        },
        {
            "id": "staff-1",
            "tenant_id": tenant_id,
            "email": "admin@tenant.test",
            "business_name": None,
            "contact_name": None,
            "full_name": "Acme Co",
            "role": "admin",
        },
    ]


@pytest.fixture
def seeded_db(mock_db, sample_catalog_rows, sample_customer_rows) -> "MockSupabaseClient":
    """Mock database with catalog and customers loaded."""
    mock_db.set_table_data("items", sample_catalog_rows)
    mock_db.set_table_data("users", sample_customer_rows)
    return mock_db
