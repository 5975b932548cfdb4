"""Dashboard content routes: announcements and quick access cards."""

from fastapi import APIRouter, Depends

from portal.dependencies import get_content_proxy
from portal.schemas.content import Announcement, QuickAccessItem
from portal.services.content_proxy import ContentProxy

router = APIRouter(tags=["content"])


@router.get("/announcements", response_model=list[Announcement])
async def list_announcements(
    proxy: ContentProxy = Depends(get_content_proxy),
) -> list[Announcement]:
    """Published announcements, newest first."""
    return await proxy.list_announcements()


@router.get("/quick-access", response_model=list[QuickAccessItem])
async def list_quick_access(
    proxy: ContentProxy = Depends(get_content_proxy),
) -> list[QuickAccessItem]:
    """Active quick access cards in their configured order."""
    return await proxy.list_quick_access()
