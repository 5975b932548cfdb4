"""Pydantic schemas."""

from portal.schemas.airtable import AirtablePage, AirtableRecord, SortSpec
from portal.schemas.content import Announcement, Dashboard, QuickAccessItem, RecentActivity
from portal.schemas.members import (
    AuthResponse,
    LoginPayload,
    MemberAccount,
    SubscriptionStatus,
)
from portal.schemas.programs import ClinicalProgram
from portal.schemas.resources import (
    GENERAL_PROGRAM,
    ProgramSlug,
    ResourceFilters,
    ResourceItem,
    ResourceType,
    SortKey,
)

__all__ = [
    "AirtablePage",
    "AirtableRecord",
    "Announcement",
    "AuthResponse",
    "ClinicalProgram",
    "Dashboard",
    "GENERAL_PROGRAM",
    "LoginPayload",
    "MemberAccount",
    "ProgramSlug",
    "QuickAccessItem",
    "RecentActivity",
    "ResourceFilters",
    "ResourceItem",
    "ResourceType",
    "SortKey",
    "SortSpec",
    "SubscriptionStatus",
]
