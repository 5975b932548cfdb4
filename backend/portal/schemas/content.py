"""Pydantic schemas for dashboard content: announcements, quick access, activity."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from portal.schemas.programs import ClinicalProgram
from portal.schemas.resources import ResourceItem


class Announcement(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    body: str = ""
    date_iso: str | None = Field(default=None, alias="dateISO")
    type: Literal["update", "webinar", "regulatory"] | None = None


class QuickAccessItem(BaseModel):
    """Dashboard quick access card."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    subtitle: str = ""
    icon: str = "File"
    cta: Literal["Download", "Watch"] = "Download"
    resource_id: str | None = Field(default=None, alias="resourceId")


class RecentActivity(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    resource_id: str = Field(alias="resourceId")
    name: str
    program: str | None = None
    accessed_at_iso: str = Field(alias="accessedAtISO")


class Dashboard(BaseModel):
    """Everything the member dashboard renders, fetched in one fan-out."""

    model_config = ConfigDict(populate_by_name=True)

    programs: list[ClinicalProgram] = Field(default_factory=list)
    quick_access: list[QuickAccessItem] = Field(default_factory=list, alias="quickAccess")
    bookmarks: list[ResourceItem] = Field(default_factory=list)
    recent_activity: list[RecentActivity] = Field(default_factory=list, alias="recentActivity")
    announcements: list[Announcement] = Field(default_factory=list)
