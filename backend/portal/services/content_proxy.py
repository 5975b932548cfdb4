"""Server-side reads backing the ``/api`` proxy endpoints.

These tables are addressed by field name: the resource listing translates
the incoming query string with the query builder, and every record goes
through the name-based record mapper.
"""

import logging
from collections.abc import Mapping
from typing import Any

from portal.airtable_schema import ProxyTables
from portal.schemas.airtable import SortSpec
from portal.schemas.content import Announcement, QuickAccessItem
from portal.schemas.programs import ClinicalProgram
from portal.schemas.resources import ResourceItem
from portal.services.airtable_client import AirtableClient
from portal.services.query_builder import (
    build_resource_filter_formula,
    build_resource_sort,
    clamp_page_size,
    encode_sort_params,
)
from portal.services.record_mapper import (
    map_announcement,
    map_program,
    map_quick_access,
    map_resource,
)

logger = logging.getLogger(__name__)

ACTIVE_FORMULA = "{IsActive} = TRUE()"
PUBLISHED_FORMULA = "{IsPublished} = TRUE()"


class ContentProxy:
    """Reads the name-addressed content tables on behalf of HTTP clients."""

    def __init__(self, client: AirtableClient):
        self.client = client

    async def list_programs(self) -> list[ClinicalProgram]:
        params = [("filterByFormula", ACTIVE_FORMULA)]
        params += encode_sort_params([SortSpec(field="Name", direction="asc")])
        records = await self.client.list_records(ProxyTables.PROGRAMS, params, by_field_id=False)
        return [map_program(r) for r in records]

    async def list_resources(self, query: Mapping[str, Any]) -> list[ResourceItem]:
        """List resources matching the UI query string.

        Only the first page is returned; ``limit`` becomes the page size.
        """
        params: list[tuple[str, Any]] = []
        formula = build_resource_filter_formula(query)
        if formula:
            params.append(("filterByFormula", formula))
        params.append(("pageSize", clamp_page_size(query.get("limit"))))
        params += encode_sort_params(build_resource_sort(query))

        logger.debug("Resource listing formula=%s", formula)
        records = await self.client.list_records(
            ProxyTables.RESOURCES, params, by_field_id=False, paginate=False
        )
        return [map_resource(r) for r in records]

    async def get_resource(self, resource_id: str) -> ResourceItem:
        record = await self.client.get_record(ProxyTables.RESOURCES, resource_id, by_field_id=False)
        return map_resource(record)

    async def list_announcements(self) -> list[Announcement]:
        params = [("filterByFormula", PUBLISHED_FORMULA)]
        params += encode_sort_params([SortSpec(field="DateISO", direction="desc")])
        records = await self.client.list_records(ProxyTables.ANNOUNCEMENTS, params, by_field_id=False)
        return [map_announcement(r) for r in records]

    async def list_quick_access(self) -> list[QuickAccessItem]:
        params = [("filterByFormula", ACTIVE_FORMULA)]
        params += encode_sort_params([SortSpec(field="SortOrder", direction="asc")])
        records = await self.client.list_records(ProxyTables.QUICK_ACCESS, params, by_field_id=False)
        return [map_quick_access(r) for r in records]
