"""Resource library routes.

Query parameters are passed through to the query builder as-is; anything it
doesn't recognise is ignored rather than rejected.
"""

from fastapi import APIRouter, Depends, Query

from portal.dependencies import get_content_proxy
from portal.schemas.resources import ResourceItem
from portal.services.content_proxy import ContentProxy

router = APIRouter(prefix="/resources", tags=["resources"])


@router.get("", response_model=list[ResourceItem])
async def list_resources(
    proxy: ContentProxy = Depends(get_content_proxy),
    program: str | None = None,
    type: str | None = None,
    bookmarked: str | None = None,
    search: str | None = None,
    limit: str | None = None,
    sort_by: str | None = Query(None, alias="sortBy"),
    sort_order: str | None = Query(None, alias="sortOrder"),
) -> list[ResourceItem]:
    """List resources with optional filtering and sorting.

    Args:
        program: Program slug (exact match on the Program field).
        type: Resource type label.
        bookmarked: "true" to return bookmarked resources only.
        search: Case-insensitive text search over name, tags and category.
        limit: Page size, clamped to 1-100 (default 50).
        sort_by: name, lastUpdated, downloadCount or category.
        sort_order: asc or desc.
    """
    query = {
        "program": program,
        "type": type,
        "bookmarked": bookmarked,
        "search": search,
        "limit": limit,
        "sortBy": sort_by,
        "sortOrder": sort_order,
    }
    return await proxy.list_resources(query)


@router.get("/{resource_id}", response_model=ResourceItem)
async def get_resource(
    resource_id: str,
    proxy: ContentProxy = Depends(get_content_proxy),
) -> ResourceItem:
    return await proxy.get_resource(resource_id)
