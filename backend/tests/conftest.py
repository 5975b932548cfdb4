"""Pytest configuration and shared fixtures.

This module provides centralized test fixtures for:
- An in-memory Airtable REST API served through httpx.MockTransport
- Airtable clients bound to that fake
- HTTP client for API testing
- Local stores for the portal facade
"""

from typing import Any
from unittest.mock import AsyncMock

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from portal.dependencies import get_airtable_client
from portal.main import app
from portal.services.airtable_client import AirtableClient
from portal.services.local_store import MemoryStore

API_KEY = "keyTest123"
BASE_ID = "appTest123"
API_URL = "https://api.airtable.test/v0"


def airtable_record(
    record_id: str,
    fields: dict[str, Any] | None = None,
    created_time: str = "2025-01-01T00:00:00.000Z",
) -> dict[str, Any]:
    """Build a raw Airtable record payload."""
    return {"id": record_id, "createdTime": created_time, "fields": fields or {}}


def airtable_error(status_code: int, error_type: str, message: str) -> httpx.Response:
    return httpx.Response(status_code, json={"error": {"type": error_type, "message": message}})


class FakeAirtable:
    """In-memory stand-in for the Airtable REST API.

    Tables are stored as lists of pages; the continuation token is the index
    of the next page. Responses queued with ``queue()`` are returned, in
    order, before any normal handling.
    """

    def __init__(self):
        self.pages: dict[str, list[list[dict[str, Any]]]] = {}
        self.records: dict[tuple[str, str], dict[str, Any]] = {}
        self.requests: list[httpx.Request] = []
        self._queued: list[httpx.Response] = []

    def add_table(self, table: str, records: list[dict[str, Any]], page_size: int | None = None) -> None:
        size = page_size or max(len(records), 1)
        pages = [records[i : i + size] for i in range(0, len(records), size)] or [[]]
        self.pages[table] = pages
        for record in records:
            self.records[(table, record["id"])] = record

    def add_record(self, table: str, record: dict[str, Any]) -> None:
        self.records[(table, record["id"])] = record

    def queue(self, *responses: httpx.Response) -> None:
        self._queued.extend(responses)

    def requests_for(self, table: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.split("/")[3] == table]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._queued:
            return self._queued.pop(0)

        parts = request.url.path.split("/")  # ["", "v0", base, table, (record id)]
        table = parts[3]

        if len(parts) > 4:
            record = self.records.get((table, parts[4]))
            if record is None:
                return airtable_error(404, "MODEL_ID_NOT_FOUND", "Could not find record")
            return httpx.Response(200, json=record)

        pages = self.pages.get(table)
        if pages is None:
            return airtable_error(404, "TABLE_NOT_FOUND", "Could not find table")

        offset = request.url.params.get("offset")
        index = int(offset) if offset else 0
        body: dict[str, Any] = {"records": pages[index]}
        if index + 1 < len(pages):
            body["offset"] = str(index + 1)
        return httpx.Response(200, json=body)


@pytest.fixture
def fake_airtable() -> FakeAirtable:
    return FakeAirtable()


@pytest.fixture
def sleep_mock() -> AsyncMock:
    """Replaces asyncio.sleep inside the Airtable client."""
    return AsyncMock()


@pytest_asyncio.fixture
async def airtable_client(fake_airtable, sleep_mock):
    """Airtable client wired to the in-memory fake."""
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake_airtable.handler))
    client = AirtableClient(
        API_KEY,
        BASE_ID,
        api_url=API_URL,
        http_client=http_client,
        sleep=sleep_mock,
    )
    yield client
    await http_client.aclose()


@pytest_asyncio.fixture
async def client(airtable_client):
    """Async test client for the FastAPI app backed by the fake Airtable."""

    async def override_get_airtable_client():
        return airtable_client

    app.dependency_overrides[get_airtable_client] = override_get_airtable_client

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.pop(get_airtable_client, None)


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()
