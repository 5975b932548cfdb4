"""FastAPI dependencies for the proxy routes."""

from collections.abc import AsyncIterator

from fastapi import Depends

from portal.config import settings
from portal.services.airtable_client import AirtableClient
from portal.services.content_proxy import ContentProxy


async def get_airtable_client() -> AsyncIterator[AirtableClient]:
    """Per-request Airtable client, closed when the request finishes."""
    client = AirtableClient.from_settings(settings)
    try:
        yield client
    finally:
        await client.close()


async def get_content_proxy(
    client: AirtableClient = Depends(get_airtable_client),
) -> ContentProxy:
    return ContentProxy(client)
