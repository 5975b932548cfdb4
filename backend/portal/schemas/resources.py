"""Pydantic schemas for library resources and the filters applied to them."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProgramSlug(str, Enum):
    """The five clinical program offerings."""

    TMM = "tmm"
    MTMTFT = "mtmtft"
    TNT = "tnt"
    A1C = "a1c"
    OC = "oc"


GENERAL_PROGRAM = "general"


class ResourceType(str, Enum):
    """Fixed content categories used for filters and badges."""

    DOCUMENTATION_FORMS = "Documentation Forms"
    CLINICAL_RESOURCES = "Clinical Resources"
    PATIENT_HANDOUTS = "Patient Handouts"
    PROTOCOLS = "Protocols"
    TRAINING_MATERIALS = "Training Materials"
    MEDICAL_BILLING = "Medical Billing"
    ADDITIONAL_RESOURCES = "Additional Resources"


class SortKey(str, Enum):
    NAME = "name"
    LAST_UPDATED = "lastUpdated"
    DOWNLOAD_COUNT = "downloadCount"
    CATEGORY = "category"


class ResourceItem(BaseModel):
    """A downloadable library resource, rebuilt from Airtable on every read."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    program: str | None = None
    type: ResourceType = ResourceType.ADDITIONAL_RESOURCES
    category: str | None = None
    tags: list[str] | None = None
    file_url: str | None = Field(default=None, alias="fileUrl")
    size_mb: float | None = Field(default=None, alias="sizeMB")
    last_updated_iso: str | None = Field(default=None, alias="lastUpdatedISO")
    download_count: int | None = Field(default=None, alias="downloadCount")
    bookmarked: bool = False

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, value: Any) -> Any:
        # Unknown source categories land in the catch-all bucket
        if isinstance(value, ResourceType):
            return value
        try:
            return ResourceType(value)
        except ValueError:
            return ResourceType.ADDITIONAL_RESOURCES


class ResourceFilters(BaseModel):
    """Transient query descriptor. A missing field means "no constraint"."""

    model_config = ConfigDict(populate_by_name=True)

    program: str | list[str] | None = None
    type: ResourceType | list[ResourceType] | None = None
    category: str | None = None
    tags: list[str] | None = None
    medical_condition: list[str] | None = Field(default=None, alias="medicalCondition")
    bookmarked: bool | None = None
    search: str | None = None
    limit: int | None = Field(default=None, ge=0)
    offset: int | None = Field(default=None, ge=0)
    sort_by: str | None = Field(default=None, alias="sortBy")
    sort_order: str | None = Field(default=None, alias="sortOrder")
