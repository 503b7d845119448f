"""
Shared test fixtures.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

import asyncio
import pytest
from unittest.mock import patch
from typing import Generator, Optional

from models.catalog_import import ExtractionResult
from services.catalog_repository import InMemoryCatalogRepository
from services.catalog_service import CatalogStore
from services.session_service import ConfiguratorSession

# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None):
        self.data = data or []
        self.count = len(self.data)


class MockSupabaseQuery:
    """
    Mock Supabase query builder with chainable methods.

    Rows live in the owning table, so an upsert is visible to a later select.
    """

    def __init__(self, rows: list, operation: str = "select", payload: dict = None):
        self._rows = rows
        self._operation = operation
        self._payload = payload
        self._filters: list[tuple[str, object]] = []

    def select(self, *args, **kwargs):
        return self

    def eq(self, column, value):
        self._filters.append((column, value))
        return self

    def _matches(self, row: dict) -> bool:
        return all(row.get(column) == value for column, value in self._filters)

    def execute(self) -> MockSupabaseResponse:
        if self._operation == "upsert":
            for index, row in enumerate(self._rows):
                if row.get("key") == self._payload.get("key"):
                    self._rows[index] = {**row, **self._payload}
                    break
            else:
                self._rows.append(dict(self._payload))
            return MockSupabaseResponse([self._payload])

        if self._operation == "delete":
            deleted = [row for row in self._rows if self._matches(row)]
            self._rows[:] = [row for row in self._rows if not self._matches(row)]
            return MockSupabaseResponse(deleted)

        return MockSupabaseResponse([dict(row) for row in self._rows if self._matches(row)])


class MockSupabaseTable:
    """Mock Supabase table backed by a list of row dicts."""

    def __init__(self, rows: list):
        self._rows = rows

    def select(self, *args, **kwargs):
        return MockSupabaseQuery(self._rows, "select")

    def upsert(self, data: dict):
        return MockSupabaseQuery(self._rows, "upsert", data)

    def delete(self):
        return MockSupabaseQuery(self._rows, "delete")


class MockSupabaseClient:
    """Mock Supabase client."""

    def __init__(self):
        self._tables: dict[str, list] = {}

    def set_table_data(self, table_name: str, data: list):
        """Configure mock rows for a table."""
        self._tables[table_name] = list(data)

    def rows(self, table_name: str) -> list:
        return self._tables.setdefault(table_name, [])

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        return MockSupabaseTable(self.rows(name))


# ===================
# FAKE EXTRACTOR
# ===================

class FakeExtractor:
    """
    Stands in for the Claude extraction service.

    Records every call so tests can assert the service was never reached.
    """

    def __init__(self, items: Optional[list] = None, error: Optional[Exception] = None):
        self.items = items if items is not None else []
        self.error = error
        self.calls: list[str] = []

    async def extract(self, pdf_base64: str) -> ExtractionResult:
        self.calls.append(pdf_base64)
        if self.error is not None:
            raise self.error
        return ExtractionResult(items=list(self.items))


class GatedExtractor(FakeExtractor):
    """FakeExtractor that blocks until the test opens the gate."""

    def __init__(self, items: Optional[list] = None):
        super().__init__(items)
        self.gate = asyncio.Event()

    async def extract(self, pdf_base64: str) -> ExtractionResult:
        self.calls.append(pdf_base64)
        await self.gate.wait()
        return ExtractionResult(items=list(self.items))


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("settings", [
                {"key": "catalog_categories", "value": "{...}"}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def store() -> CatalogStore:
    """Catalog store seeded with the built-in catalog."""
    return CatalogStore()


@pytest.fixture
def memory_repository() -> InMemoryCatalogRepository:
    return InMemoryCatalogRepository()


@pytest.fixture
def sample_rows() -> list:
    """Rows as the extraction service returns them: two frames, one sash, one other."""
    return [
        {"artCode": "PL 2001", "description": "Telaio L 70", "weight": 1200, "type": "frame"},
        {"artCode": "PL 2002", "description": "Telaio Z 70", "weight": 1350, "type": "frame"},
        {"artCode": "PL 3001", "description": "Anta 70", "weight": 1000, "type": "sash"},
        {"artCode": "GU 10", "description": "Guarnizione", "weight": 40, "type": "other"},
    ]


@pytest.fixture
def fake_extractor(sample_rows) -> FakeExtractor:
    return FakeExtractor(items=sample_rows)


@pytest.fixture
def pdf_bytes() -> bytes:
    """Smallest payload that passes the PDF input checks."""
    return b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\n%%EOF\n"


@pytest.fixture
def session(memory_repository, fake_extractor) -> ConfiguratorSession:
    """Configurator session with in-memory persistence and a fake extractor."""
    return ConfiguratorSession(repository=memory_repository, extractor=fake_extractor)


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client(session) -> Generator:
    """
    Create FastAPI test client bound to the session fixture.

    Usage:
        def test_endpoint(test_client, session):
            response = test_client.get("/api/quote")
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from main import app

    with patch("services.session_service._configurator_session", session):
        yield TestClient(app)
