"""Airtable base layout: table IDs, field IDs and per-table resource layouts.

The catalog tables are addressed by stable field ID (reads set
``returnFieldsByFieldId=true``) so display-name renames in Airtable don't
break the mapping. The proxy tables are addressed by field name because their
filter formulas reference names.
"""

from dataclasses import dataclass

from portal.schemas.resources import ResourceType


# === Catalog tables (field-ID addressed) ===


class Tables:
    PROGRAMS = "tblXsjw9EvEX1JnCy"
    TRAINING = "tblrXWJ8gC6G3L2wG"
    PROTOCOLS = "tblh5Hqrd512J5C9e"
    FORMS = "tblFahap8ERhQk0p5"
    HANDOUTS = "tblF0sNzTgGF4EBga"
    GUIDELINES = "tblfIcFCFpVlOpsGr"
    BILLING = "tbly4NjBbcptuc9G5"
    ADDITIONAL = "tbldWUMJBg4nuq6rQ"
    MEMBERS = "tblxoJz15zMr6CeeV"


class ProgramFields:
    NAME = "fldZMC178eiIyTq3w"
    DESCRIPTION = "fldVNSdftxLraYp6P"
    OVERVIEW = "fldNRUwiQcesXso0s"
    EXPERIENCE_LEVEL = "fldAxTeupBBeP9XDb"
    SLUG = "fldqrANZRsEuolDR6"
    TRAINING_LINKS = "fldrc5dQ9rDynGNIM"
    PROTOCOL_LINKS = "fldsAVzNg92Mdz1K8"
    FORM_LINKS = "fldlHsJtPJcTl8pyp"
    ADDITIONAL_LINKS = "flduqKYNvbzw6iuOo"

    RESOURCE_LINKS = (TRAINING_LINKS, PROTOCOL_LINKS, FORM_LINKS, ADDITIONAL_LINKS)


class MemberFields:
    EMAIL = "fldn55xDaXjqTHb2O"
    TEMP_PASSWORD = "fldx139PuTqJcH8jA"
    PASSWORD_HASH = "fldExgYYdxtZSIsPE"
    FIRST_NAME = "fld3O5fcRKLUL5mVz"
    LAST_NAME = "fldKRPy23W3qwTqN6"
    PHARMACY_NAME = "flds16myqpFa2qzIw"
    SUBSCRIPTION_STATUS = "fldKbzgtYIRkJOalj"
    LAST_ACTIVITY = "fldb0j5XwlKclqKlQ"


# filterByFormula references field names even when fields are returned by ID
MEMBER_EMAIL_FIELD_NAME = "Email Address"
FORM_PROGRAM_SLUG_FIELD_NAME = "programSlug"


@dataclass(frozen=True)
class ResourceSource:
    """How one catalog table maps onto ResourceItem."""

    key: str
    table_id: str
    resource_type: ResourceType
    default_name: str
    name_field: str
    file_field: str
    link_field: str | None = None
    category_field: str | None = None
    program_field: str | None = None


FORMS = ResourceSource(
    key="forms",
    table_id=Tables.FORMS,
    resource_type=ResourceType.DOCUMENTATION_FORMS,
    default_name="Form",
    name_field="fldk7HpJIGHv3VOc4",
    file_field="fldrRhyCyGgUpWuIG",
    link_field="fldGi4HEH9nq4BLVy",
    category_field="fldfuX4T5a7NBb9ey",
    program_field="fld6gEf0zT4Hkc2Ne",
)
# Form subcategory (fldzNsQ9HJxST0QSD) is present in the base but not surfaced

PROTOCOLS = ResourceSource(
    key="protocols",
    table_id=Tables.PROTOCOLS,
    resource_type=ResourceType.PROTOCOLS,
    default_name="Protocol",
    name_field="fldBy2Thpsn4AlIbU",
    file_field="fldi28XFMhDfcosX2",
    link_field="fld1fFDUsAnnAmmLo",
    program_field="fldkzxDH20zEQ51vl",
)

TRAINING = ResourceSource(
    key="training",
    table_id=Tables.TRAINING,
    resource_type=ResourceType.TRAINING_MATERIALS,
    default_name="Training Module",
    name_field="fldGNfcyijbCckJ77",
    file_field="fld7FOPvfmAxWd1TI",
    link_field="fldKyw9533skmVv3p",
    # Module length doubles as the category label
    category_field="fldCbTTBwwjxp6z7d",
    program_field="fldV7PD4KiUwJqdjY",
)

HANDOUTS = ResourceSource(
    key="handouts",
    table_id=Tables.HANDOUTS,
    resource_type=ResourceType.PATIENT_HANDOUTS,
    default_name="Patient Handout",
    name_field="fld9yN8YbZSDs81IS",
    file_field="fldPxpdAjgmLUrree",
)

GUIDELINES = ResourceSource(
    key="guidelines",
    table_id=Tables.GUIDELINES,
    resource_type=ResourceType.CLINICAL_RESOURCES,
    default_name="Clinical Guideline",
    name_field="fld73kw2epKg8zjsP",
    file_field="fldaMNCCDzIs7kMur",
    link_field="fld9o5nSKaww5gEH3",
)

BILLING = ResourceSource(
    key="billing",
    table_id=Tables.BILLING,
    resource_type=ResourceType.MEDICAL_BILLING,
    default_name="Billing Resource",
    name_field="fldeYxRrwTvAZxtyS",
    file_field="fldHzAXErEJMBIPkQ",
)

ADDITIONAL = ResourceSource(
    key="additional",
    table_id=Tables.ADDITIONAL,
    resource_type=ResourceType.ADDITIONAL_RESOURCES,
    default_name="Resource",
    name_field="fldPhWKcmTg8mcNUz",
    file_field="fldOahqDBWH463d6y",
    link_field="fldTqxYoEEFAw0Y0p",
    program_field="fldA2oPeW3DiTsae0",
)

# Library listing order
RESOURCE_SOURCES: tuple[ResourceSource, ...] = (
    FORMS,
    PROTOCOLS,
    TRAINING,
    HANDOUTS,
    GUIDELINES,
    BILLING,
    ADDITIONAL,
)

# Probe order for single-resource lookups (most frequently linked first)
RESOURCE_PROBE_ORDER: tuple[ResourceSource, ...] = (
    FORMS,
    PROTOCOLS,
    TRAINING,
    ADDITIONAL,
    HANDOUTS,
    GUIDELINES,
    BILLING,
)


# === Proxy tables (field-name addressed) ===


class ProxyTables:
    PROGRAMS = "Clinical Programs"
    RESOURCES = "Clinical Program Resources"
    ANNOUNCEMENTS = "Announcements"
    QUICK_ACCESS = "Quick Access"
