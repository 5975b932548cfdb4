"""Map raw Airtable records onto portal view models.

All functions are pure and total: a record missing any or every field still
maps to a valid model built from literal defaults. Field access always goes
through the accessor helpers below, which never trust field presence.

Two layouts exist:
- proxy tables, addressed by field name with fallback chains
  (``DisplayName`` -> ``Name`` -> ``Title`` -> ``"Resource"``)
- catalog tables, addressed by stable field ID via ResourceSource layouts
"""

import math
from datetime import datetime, timezone
from typing import Any

from portal.airtable_schema import MemberFields, ProgramFields, ResourceSource
from portal.schemas.airtable import AirtableRecord
from portal.schemas.content import Announcement, QuickAccessItem
from portal.schemas.members import MemberAccount, SubscriptionStatus
from portal.schemas.programs import ClinicalProgram
from portal.schemas.resources import GENERAL_PROGRAM, ResourceItem, ResourceType

BYTES_PER_MB = 1024 * 1024

PROGRAM_ICONS = {
    "tmm": "CalendarCheck",
    "mtmtft": "Pill",
    "tnt": "TestTube2",
    "a1c": "ActivitySquare",
    "oc": "Stethoscope",
}
DEFAULT_PROGRAM_ICON = "Layers"

_ANNOUNCEMENT_TYPES = {"update", "webinar", "regulatory"}
_QUICK_ACCESS_CTAS = {"Download", "Watch"}


# =============================================================================
# Field accessors
# =============================================================================


def field_value(fields: dict[str, Any] | None, name: str) -> Any | None:
    """Return a field's value, treating empty values as absent."""
    if not fields:
        return None
    value = fields.get(name)
    if value is None or value == "" or value == [] or value is False:
        return None
    return value


def first_field(fields: dict[str, Any] | None, *names: str) -> Any | None:
    """Return the first present value among candidate field names."""
    for name in names:
        value = field_value(fields, name)
        if value is not None:
            return value
    return None


def as_str(value: Any) -> str:
    """Stringify a field value; lookup/linked fields arrive as lists."""
    if value is None:
        return ""
    if isinstance(value, list):
        return ",".join(as_str(v) for v in value)
    return str(value)


def field_str(fields: dict[str, Any] | None, *names: str, default: str = "") -> str:
    value = first_field(fields, *names)
    text = as_str(value) if value is not None else ""
    return text or default


def as_number(value: Any) -> float | None:
    """Coerce to a finite float, or None when the value isn't numeric."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def as_int(value: Any, default: int = 0) -> int:
    number = as_number(value)
    return int(number) if number is not None else default


def field_list(fields: dict[str, Any] | None, name: str) -> list[Any]:
    value = (fields or {}).get(name)
    return value if isinstance(value, list) else []


def first_attachment(value: Any) -> tuple[str | None, float | None]:
    """Return ``(url, size_mb)`` of the first attachment in an attachment list.

    Size is ``round(bytes / 1048576, 2)``. A missing or empty list yields
    ``(None, None)``.
    """
    if not isinstance(value, list) or not value:
        return None, None
    attachment = value[0]
    if not isinstance(attachment, dict):
        return None, None
    url = as_str(attachment.get("url")) or None
    size = as_number(attachment.get("size"))
    size_mb = round(size / BYTES_PER_MB, 2) if size else None
    return url, size_mb


def icon_for_slug(slug: str | None) -> str:
    return PROGRAM_ICONS.get((slug or "").lower(), DEFAULT_PROGRAM_ICON)


# =============================================================================
# Proxy tables (field names)
# =============================================================================


def map_program(record: AirtableRecord) -> ClinicalProgram:
    f = record.fields
    resource_count = as_int(field_value(f, "ResourceCount")) or len(field_list(f, "Resources"))
    return ClinicalProgram(
        slug=field_str(f, "Slug", "Code", default="program"),
        name=field_str(f, "Name", default="Clinical Program"),
        description=field_str(f, "Description", "Summary"),
        icon=field_str(f, "Icon", default=DEFAULT_PROGRAM_ICON),
        resource_count=max(resource_count, 0),
        last_updated_iso=field_str(f, "LastUpdatedISO", "UpdatedISO") or record.created_time,
        download_count=as_int(field_value(f, "DownloadCount")),
    )


def map_resource(record: AirtableRecord) -> ResourceItem:
    f = record.fields
    attachment_url, attachment_size = first_attachment(f.get("File"))
    tags = field_list(f, "Tags")
    return ResourceItem(
        id=record.id,
        name=field_str(f, "DisplayName", "Name", "Title", default="Resource"),
        program=field_str(f, "Program", "ProgramCode", default=GENERAL_PROGRAM),
        type=field_str(f, "ResourceType", "Type", default=ResourceType.ADDITIONAL_RESOURCES.value),
        category=field_str(f, "Category"),
        tags=[as_str(t) for t in tags],
        file_url=attachment_url or field_str(f, "Url", "Link") or None,
        size_mb=attachment_size if attachment_size is not None else as_number(field_value(f, "SizeMB")),
        last_updated_iso=field_str(f, "LastUpdatedISO", "UpdatedISO") or record.created_time,
        download_count=as_int(field_value(f, "DownloadCount")),
        bookmarked=bool(f.get("IsBookmarked")),
    )


def map_announcement(record: AirtableRecord) -> Announcement:
    f = record.fields
    kind = field_str(f, "Type")
    return Announcement(
        id=record.id,
        title=field_str(f, "Title", default="Announcement"),
        body=field_str(f, "Body", "Content"),
        date_iso=field_str(f, "DateISO") or record.created_time,
        type=kind if kind in _ANNOUNCEMENT_TYPES else None,
    )


def map_quick_access(record: AirtableRecord) -> QuickAccessItem:
    f = record.fields
    cta = field_str(f, "CTA", default="Download")
    return QuickAccessItem(
        id=record.id,
        title=field_str(f, "Title", "Name", default="Quick Access"),
        subtitle=field_str(f, "Subtitle"),
        icon=field_str(f, "Icon", default="File"),
        cta=cta if cta in _QUICK_ACCESS_CTAS else "Download",
        resource_id=field_str(f, "ResourceId") or None,
    )


# =============================================================================
# Catalog tables (field IDs)
# =============================================================================


def map_catalog_program(record: AirtableRecord) -> ClinicalProgram:
    f = record.fields
    slug = field_str(f, ProgramFields.SLUG).lower()
    resource_count = sum(len(field_list(f, link)) for link in ProgramFields.RESOURCE_LINKS)
    return ClinicalProgram(
        slug=slug or "tmm",
        name=field_str(f, ProgramFields.NAME, default="Program"),
        description=field_str(f, ProgramFields.DESCRIPTION),
        icon=icon_for_slug(slug),
        resource_count=resource_count,
        last_updated_iso=record.created_time,
        download_count=None,
    )


def map_catalog_resource(
    record: AirtableRecord,
    source: ResourceSource,
    program: str | None = None,
) -> ResourceItem:
    """Map a catalog record using its table's layout.

    Args:
        record: Raw record from one of the catalog tables.
        source: The table's field layout and fixed resource type.
        program: Force the program slug (used when the caller already
            filtered the table by program).
    """
    f = record.fields
    url, size_mb = first_attachment(f.get(source.file_field))
    link = field_str(f, source.link_field) if source.link_field else ""

    if program is None:
        program = GENERAL_PROGRAM
        if source.program_field:
            program = field_str(f, source.program_field).lower() or GENERAL_PROGRAM

    category = None
    if source.category_field:
        category = field_str(f, source.category_field)

    return ResourceItem(
        id=record.id,
        name=field_str(f, source.name_field, default=source.default_name),
        program=program,
        type=source.resource_type,
        category=category,
        tags=None,
        file_url=link or url,
        size_mb=size_mb,
        last_updated_iso=record.created_time,
        download_count=None,
        bookmarked=False,
    )


def map_member(record: AirtableRecord, fallback_email: str = "") -> MemberAccount:
    f = record.fields
    raw_status = field_str(f, MemberFields.SUBSCRIPTION_STATUS, default=SubscriptionStatus.ACTIVE.value)
    try:
        subscription_status = SubscriptionStatus(raw_status)
    except ValueError:
        subscription_status = SubscriptionStatus.ACTIVE
    last_login = (
        field_str(f, MemberFields.LAST_ACTIVITY)
        or record.created_time
        or datetime.now(timezone.utc).isoformat()
    )
    return MemberAccount(
        id=record.id,
        pharmacy_name=field_str(f, MemberFields.PHARMACY_NAME),
        email=field_str(f, MemberFields.EMAIL, default=fallback_email),
        subscription_status=subscription_status,
        last_login_iso=last_login,
    )
