"""Clinical program routes."""

from fastapi import APIRouter, Depends

from portal.dependencies import get_content_proxy
from portal.schemas.programs import ClinicalProgram
from portal.services.content_proxy import ContentProxy

router = APIRouter(prefix="/programs", tags=["programs"])


@router.get("", response_model=list[ClinicalProgram])
async def list_programs(
    proxy: ContentProxy = Depends(get_content_proxy),
) -> list[ClinicalProgram]:
    """List active clinical programs, sorted by name."""
    return await proxy.list_programs()
