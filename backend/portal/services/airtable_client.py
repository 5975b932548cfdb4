"""Async Airtable REST client.

Provides paginated list reads (following the ``offset`` continuation token
until the server stops returning one), single-record reads, and the only
retry policy in the system: on HTTP 429, sleep for the server-advised
``Retry-After`` (default 1 second) and re-issue the same page request.
Rate-limit retries are capped per page; exhausting them raises RateLimitError.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any
from urllib.parse import quote

import httpx

from portal.config import Settings
from portal.errors import AirtableError, ConfigError, RateLimitError
from portal.schemas.airtable import AirtablePage, AirtableRecord

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.airtable.com/v0"
DEFAULT_RETRY_AFTER_SECONDS = 1.0
DEFAULT_MAX_RATE_LIMIT_RETRIES = 5

QueryParams = Mapping[str, Any] | Sequence[tuple[str, Any]]


def parse_retry_after(value: str | None) -> float:
    """Seconds to wait from a Retry-After header, defaulting to 1."""
    if not value:
        return DEFAULT_RETRY_AFTER_SECONDS
    try:
        seconds = float(value)
    except ValueError:
        return DEFAULT_RETRY_AFTER_SECONDS
    return seconds if seconds >= 0 else DEFAULT_RETRY_AFTER_SECONDS


def _normalize_params(params: QueryParams | None) -> list[tuple[str, str]]:
    if not params:
        return []
    items = params.items() if isinstance(params, Mapping) else params
    return [(str(k), str(v)) for k, v in items if v is not None]


class AirtableClient:
    """Client bound to one Airtable base.

    Credentials are checked lazily: constructing a client without them is
    allowed, but any request raises ConfigError before touching the network.
    """

    def __init__(
        self,
        api_key: str | None,
        base_id: str | None,
        *,
        api_url: str = DEFAULT_API_URL,
        max_rate_limit_retries: int = DEFAULT_MAX_RATE_LIMIT_RETRIES,
        timeout_seconds: float | None = None,
        http_client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.api_key = api_key
        self.base_id = base_id
        self.api_url = api_url.rstrip("/")
        self.max_rate_limit_retries = max_rate_limit_retries
        self.timeout_seconds = timeout_seconds
        self._client = http_client
        self._owns_client = http_client is None
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "AirtableClient":
        return cls(
            settings.airtable_api_key,
            settings.airtable_base_id,
            api_url=settings.airtable_api_url,
            max_rate_limit_retries=settings.airtable_max_rate_limit_retries,
            timeout_seconds=settings.airtable_timeout_seconds,
            **kwargs,
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.base_id)

    # -- Session management --------------------------------------------------

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout_seconds))
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.close()

    # -- Requests ------------------------------------------------------------

    def _require_config(self) -> None:
        if not self.api_key:
            raise ConfigError("AIRTABLE_API_KEY is not set")
        if not self.base_id:
            raise ConfigError("AIRTABLE_BASE_ID is not set")

    def _table_url(self, table: str, record_id: str | None = None) -> str:
        url = f"{self.api_url}/{quote(self.base_id or '', safe='')}/{quote(table, safe='')}"
        if record_id is not None:
            url += f"/{quote(record_id, safe='')}"
        return url

    async def _get(self, url: str, params: list[tuple[str, str]]) -> dict[str, Any]:
        """GET with rate-limit handling; returns the decoded JSON body."""
        self._require_config()
        client = self._get_client()
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        rate_limited = 0
        while True:
            response = await client.get(url, params=params, headers=headers)

            if response.status_code == 429:
                if rate_limited >= self.max_rate_limit_retries:
                    logger.error(
                        "Airtable rate limit persisted after %d retries: %s",
                        rate_limited,
                        url,
                    )
                    raise RateLimitError("Airtable rate limit exceeded")
                delay = parse_retry_after(response.headers.get("Retry-After"))
                rate_limited += 1
                logger.warning(
                    "Airtable 429 for %s, retrying in %.1fs (retry %d/%d)",
                    url,
                    delay,
                    rate_limited,
                    self.max_rate_limit_retries,
                )
                await self._sleep(delay)
                continue

            if response.is_error:
                raise self._error_from_response(response)

            return response.json()

    @staticmethod
    def _error_from_response(response: httpx.Response) -> AirtableError:
        """Build an AirtableError preserving upstream status and error type."""
        message = f"Airtable request failed: {response.status_code}"
        code = None
        try:
            detail = response.json()
        except ValueError:
            detail = None

        error = detail.get("error") if isinstance(detail, dict) else None
        if isinstance(error, dict):
            message = error.get("message") or message
            code = error.get("type")
        elif isinstance(error, str):
            code = error

        logger.warning("Airtable error %d (%s): %s", response.status_code, code, message)
        return AirtableError(message, status_code=response.status_code, code=code)

    async def list_records(
        self,
        table: str,
        params: QueryParams | None = None,
        *,
        by_field_id: bool = True,
        paginate: bool = True,
    ) -> list[AirtableRecord]:
        """Read all records from a table, following continuation tokens.

        Args:
            table: Table ID or name.
            params: Extra query params (``filterByFormula``, ``sort[...]``,
                ``pageSize``, ``maxRecords``...).
            by_field_id: Request fields keyed by stable field ID.
            paginate: When False, only the first page is read.

        Returns:
            Records from every page in server order.
        """
        base_params = _normalize_params(params)
        if by_field_id:
            base_params.append(("returnFieldsByFieldId", "true"))
        url = self._table_url(table)

        records: list[AirtableRecord] = []
        offset: str | None = None
        pages = 0
        while True:
            page_params = list(base_params)
            if offset:
                page_params.append(("offset", offset))

            page = AirtablePage.model_validate(await self._get(url, page_params))
            pages += 1
            records.extend(page.records)
            offset = page.offset
            if not offset or not paginate:
                break

        logger.info("Fetched %d records from %s in %d page(s)", len(records), table, pages)
        return records

    async def get_record(
        self,
        table: str,
        record_id: str,
        *,
        by_field_id: bool = True,
    ) -> AirtableRecord:
        params = [("returnFieldsByFieldId", "true")] if by_field_id else []
        data = await self._get(self._table_url(table, record_id), params)
        return AirtableRecord.model_validate(data)
