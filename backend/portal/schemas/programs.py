"""Pydantic schemas for clinical programs."""

from pydantic import BaseModel, ConfigDict, Field


class ClinicalProgram(BaseModel):
    """Program card shown on the programs page and the dashboard."""

    model_config = ConfigDict(populate_by_name=True)

    slug: str
    name: str
    description: str = ""
    icon: str = Field(default="Layers", description="lucide icon name")
    resource_count: int = Field(default=0, ge=0, alias="resourceCount")
    last_updated_iso: str | None = Field(default=None, alias="lastUpdatedISO")
    download_count: int | None = Field(default=None, alias="downloadCount")
