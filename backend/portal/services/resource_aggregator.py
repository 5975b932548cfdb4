"""Resource Library aggregation across the catalog tables.

Fetches every resource table concurrently (all-or-nothing: one failed table
fails the whole call), maps each table through its ResourceSource layout,
concatenates in source order and then applies, in order:

1. program filter - scalar or list, case-insensitive; untagged resources
   count as the literal program "general"
2. type filter - set membership
3. free-text filter - case-insensitive substring match on name
4. stable sort by the requested key

Sort order is total: strings compare case-insensitively, missing values
compare as "" (text) or 0 (counts). Equal keys keep their input order in
both ascending and descending mode.
"""

import asyncio
import logging
from collections.abc import Iterable
from typing import Any

from portal.airtable_schema import (
    FORMS,
    RESOURCE_PROBE_ORDER,
    RESOURCE_SOURCES,
    ResourceSource,
    Tables,
)
from portal.errors import AirtableError, NotFoundError
from portal.schemas.programs import ClinicalProgram
from portal.schemas.resources import (
    GENERAL_PROGRAM,
    ResourceFilters,
    ResourceItem,
    ResourceType,
    SortKey,
)
from portal.services.airtable_client import AirtableClient
from portal.services.query_builder import program_slug_formula
from portal.services.record_mapper import map_catalog_program, map_catalog_resource

logger = logging.getLogger(__name__)

# Statuses Airtable returns when a record ID belongs to a different table
_PROBE_MISS_STATUSES = frozenset({403, 404, 422})


# =============================================================================
# Client-side filtering and sorting (pure)
# =============================================================================


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return [value]


def filter_by_program(items: list[ResourceItem], program: Any) -> list[ResourceItem]:
    wanted = {str(p).lower() for p in _as_list(program)}
    if not wanted:
        return items
    return [it for it in items if (it.program or GENERAL_PROGRAM).lower() in wanted]


def filter_by_type(items: list[ResourceItem], resource_type: Any) -> list[ResourceItem]:
    wanted = {ResourceType(t) for t in _as_list(resource_type)}
    if not wanted:
        return items
    return [it for it in items if it.type in wanted]


def filter_by_search(items: list[ResourceItem], search: str | None) -> list[ResourceItem]:
    if not search:
        return items
    needle = search.lower()
    return [it for it in items if needle in it.name.lower()]


def sort_key_for(sort_by: str | None):
    """Return a key function for a logical sort key (unknown -> name)."""
    if sort_by == SortKey.LAST_UPDATED.value:
        return lambda it: it.last_updated_iso or ""
    if sort_by == SortKey.DOWNLOAD_COUNT.value:
        return lambda it: it.download_count or 0
    if sort_by == SortKey.CATEGORY.value:
        return lambda it: (it.category or "").casefold()
    return lambda it: it.name.casefold()


def sort_resources(
    items: Iterable[ResourceItem],
    sort_by: str | None = None,
    sort_order: str | None = None,
) -> list[ResourceItem]:
    descending = (sort_order or "asc").lower() == "desc"
    # sorted() is stable with reverse=True too, so ties keep input order
    return sorted(items, key=sort_key_for(sort_by), reverse=descending)


def apply_filters(items: list[ResourceItem], filters: ResourceFilters) -> list[ResourceItem]:
    """Apply program, type and search filters, sort, then offset/limit."""
    filtered = filter_by_program(items, filters.program)
    filtered = filter_by_type(filtered, filters.type)
    filtered = filter_by_search(filtered, filters.search)
    filtered = sort_resources(filtered, filters.sort_by, filters.sort_order)

    start = filters.offset or 0
    if filters.limit is not None:
        return filtered[start : start + filters.limit]
    return filtered[start:]


# =============================================================================
# Aggregator
# =============================================================================


class ResourceAggregator:
    """Reads the field-ID addressed catalog tables."""

    def __init__(
        self,
        client: AirtableClient,
        sources: tuple[ResourceSource, ...] = RESOURCE_SOURCES,
    ):
        self.client = client
        self.sources = sources

    async def _fetch_source(self, source: ResourceSource) -> list[ResourceItem]:
        records = await self.client.list_records(source.table_id)
        return [map_catalog_resource(r, source) for r in records]

    async def fetch_all(self) -> list[ResourceItem]:
        """Fetch and map every source table concurrently, in source order."""
        results = await asyncio.gather(*(self._fetch_source(s) for s in self.sources))
        items = [item for batch in results for item in batch]
        logger.info("Aggregated %d resources from %d tables", len(items), len(self.sources))
        return items

    async def get_resources(self, filters: ResourceFilters | None = None) -> list[ResourceItem]:
        items = await self.fetch_all()
        return apply_filters(items, filters or ResourceFilters())

    async def get_programs(self) -> list[ClinicalProgram]:
        records = await self.client.list_records(Tables.PROGRAMS)
        return [map_catalog_program(r) for r in records]

    async def get_program_documentation_forms(self, slug: str) -> list[ResourceItem]:
        """Documentation forms for one program, tagged with that program's slug."""
        records = await self.client.list_records(
            FORMS.table_id, {"filterByFormula": program_slug_formula(slug)}
        )
        return [map_catalog_resource(r, FORMS, program=slug) for r in records]

    async def get_resource_by_id(self, resource_id: str) -> ResourceItem:
        """Find a resource by probing each catalog table in turn.

        Raises:
            NotFoundError: If no table holds the record.
        """
        for source in RESOURCE_PROBE_ORDER:
            try:
                record = await self.client.get_record(source.table_id, resource_id)
            except AirtableError as e:
                if e.status_code in _PROBE_MISS_STATUSES:
                    logger.debug("Resource %s not in %s (%d)", resource_id, source.key, e.status_code)
                    continue
                raise
            return map_catalog_resource(record, source)

        raise NotFoundError("Resource not found")
