"""Pydantic schemas for raw Airtable payloads.

Records are treated as opaque field bags: nothing about ``fields`` is
validated here, the record mapper decides what each field means.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class AirtableRecord(BaseModel):
    """One row returned by the Airtable REST API."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str = ""
    created_time: str | None = Field(default=None, alias="createdTime")
    fields: dict[str, Any] = Field(default_factory=dict)


class AirtablePage(BaseModel):
    """One page of a list-records response."""

    model_config = ConfigDict(extra="ignore")

    records: list[AirtableRecord] = Field(default_factory=list)
    offset: str | None = None


class SortSpec(BaseModel):
    """Airtable sort descriptor (``sort[i][field]`` / ``sort[i][direction]``)."""

    model_config = ConfigDict(frozen=True)

    field: str
    direction: Literal["asc", "desc"] = "asc"
