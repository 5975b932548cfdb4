"""Tests for Airtable record -> view model mapping."""

import pytest

from portal.airtable_schema import (
    ADDITIONAL,
    FORMS,
    HANDOUTS,
    RESOURCE_SOURCES,
    TRAINING,
    MemberFields,
    ProgramFields,
)
from portal.schemas.airtable import AirtableRecord
from portal.schemas.members import SubscriptionStatus
from portal.schemas.resources import ResourceType
from portal.services.record_mapper import (
    as_str,
    field_str,
    first_attachment,
    icon_for_slug,
    map_announcement,
    map_catalog_program,
    map_catalog_resource,
    map_member,
    map_program,
    map_quick_access,
    map_resource,
)


def record(fields=None, record_id="rec1", created_time="2025-03-01T00:00:00.000Z") -> AirtableRecord:
    return AirtableRecord.model_validate(
        {"id": record_id, "createdTime": created_time, "fields": fields or {}}
    )


# =============================================================================
# Accessors
# =============================================================================


class TestAccessors:
    def test_field_str_falls_through_empty_values(self):
        fields = {"DisplayName": "", "Name": None, "Title": "Third"}
        assert field_str(fields, "DisplayName", "Name", "Title") == "Third"

    def test_field_str_default(self):
        assert field_str({}, "Missing", default="fallback") == "fallback"

    def test_field_str_handles_none_fields(self):
        assert field_str(None, "Anything") == ""

    def test_as_str_joins_lookup_lists(self):
        assert as_str(["tmm"]) == "tmm"

    def test_icon_for_slug(self):
        assert icon_for_slug("TMM") == "CalendarCheck"
        assert icon_for_slug("a1c") == "ActivitySquare"
        assert icon_for_slug("unknown") == "Layers"
        assert icon_for_slug(None) == "Layers"


class TestFirstAttachment:
    def test_size_is_rounded_megabytes(self):
        url, size_mb = first_attachment([{"url": "https://x/a.pdf", "size": 1572864}])
        assert url == "https://x/a.pdf"
        assert size_mb == 1.5

    def test_rounds_to_two_decimals(self):
        _, size_mb = first_attachment([{"url": "u", "size": 123456}])
        assert size_mb == round(123456 / 1048576, 2)

    def test_only_first_attachment_used(self):
        url, _ = first_attachment([{"url": "first"}, {"url": "second"}])
        assert url == "first"

    @pytest.mark.parametrize("value", [None, [], "not-a-list", [None], ["string"]])
    def test_absent_attachment(self, value):
        assert first_attachment(value) == (None, None)

    def test_missing_size(self):
        assert first_attachment([{"url": "u"}]) == ("u", None)


# =============================================================================
# Proxy tables
# =============================================================================


class TestMapResource:
    def test_empty_record_uses_defaults(self):
        item = map_resource(record())
        assert item.id == "rec1"
        assert item.name == "Resource"
        assert item.program == "general"
        assert item.type == ResourceType.ADDITIONAL_RESOURCES
        assert item.category == ""
        assert item.tags == []
        assert item.file_url is None
        assert item.size_mb is None
        assert item.last_updated_iso == "2025-03-01T00:00:00.000Z"
        assert item.download_count == 0
        assert item.bookmarked is False

    def test_name_fallback_chain(self):
        assert map_resource(record({"Title": "T"})).name == "T"
        assert map_resource(record({"Name": "N", "Title": "T"})).name == "N"
        assert map_resource(record({"DisplayName": "D", "Name": "N"})).name == "D"

    def test_full_record(self):
        item = map_resource(
            record(
                {
                    "DisplayName": "Enrollment Form",
                    "Program": "tmm",
                    "ResourceType": "Documentation Forms",
                    "Category": "Enrollment",
                    "Tags": ["intake", "sync"],
                    "File": [{"url": "https://files/a.pdf", "size": 2097152}],
                    "LastUpdatedISO": "2025-06-01",
                    "DownloadCount": 12,
                    "IsBookmarked": True,
                }
            )
        )
        assert item.type == ResourceType.DOCUMENTATION_FORMS
        assert item.tags == ["intake", "sync"]
        assert item.file_url == "https://files/a.pdf"
        assert item.size_mb == 2.0
        assert item.last_updated_iso == "2025-06-01"
        assert item.download_count == 12
        assert item.bookmarked is True

    def test_link_used_without_attachment(self):
        item = map_resource(record({"Url": "https://example.com/doc", "SizeMB": 3.2}))
        assert item.file_url == "https://example.com/doc"
        assert item.size_mb == 3.2

    def test_unknown_type_lands_in_additional_resources(self):
        item = map_resource(record({"ResourceType": "Posters"}))
        assert item.type == ResourceType.ADDITIONAL_RESOURCES

    def test_garbage_numbers_do_not_raise(self):
        item = map_resource(record({"DownloadCount": "many", "SizeMB": "big"}))
        assert item.download_count == 0
        assert item.size_mb is None

    def test_serialises_with_ui_field_names(self):
        data = map_resource(record({"File": [{"url": "u", "size": 1048576}]})).model_dump(by_alias=True)
        assert data["fileUrl"] == "u"
        assert data["sizeMB"] == 1.0
        assert "lastUpdatedISO" in data


class TestMapProgram:
    def test_defaults(self):
        program = map_program(record())
        assert program.slug == "program"
        assert program.name == "Clinical Program"
        assert program.description == ""
        assert program.icon == "Layers"
        assert program.resource_count == 0
        assert program.download_count == 0

    def test_resource_count_falls_back_to_linked_resources(self):
        program = map_program(record({"Resources": ["a", "b", "c"]}))
        assert program.resource_count == 3

    def test_explicit_resource_count_wins(self):
        program = map_program(record({"ResourceCount": 7, "Resources": ["a"]}))
        assert program.resource_count == 7

    def test_code_and_summary_fallbacks(self):
        program = map_program(record({"Code": "tnt", "Summary": "Testing"}))
        assert program.slug == "tnt"
        assert program.description == "Testing"


class TestMapAnnouncementAndQuickAccess:
    def test_announcement_defaults(self):
        ann = map_announcement(record())
        assert ann.title == "Announcement"
        assert ann.body == ""
        assert ann.date_iso == "2025-03-01T00:00:00.000Z"
        assert ann.type is None

    def test_announcement_content_fallback(self):
        ann = map_announcement(record({"Content": "Hello", "Type": "webinar"}))
        assert ann.body == "Hello"
        assert ann.type == "webinar"

    def test_announcement_unknown_type_dropped(self):
        assert map_announcement(record({"Type": "party"})).type is None

    def test_quick_access_defaults(self):
        item = map_quick_access(record())
        assert item.title == "Quick Access"
        assert item.subtitle == ""
        assert item.icon == "File"
        assert item.cta == "Download"
        assert item.resource_id is None

    def test_quick_access_watch(self):
        item = map_quick_access(record({"Name": "Video", "CTA": "Watch", "ResourceId": "rec9"}))
        assert item.title == "Video"
        assert item.cta == "Watch"
        assert item.resource_id == "rec9"


# =============================================================================
# Catalog tables
# =============================================================================


class TestMapCatalogResource:
    @pytest.mark.parametrize("source", RESOURCE_SOURCES, ids=lambda s: s.key)
    def test_empty_record_never_raises(self, source):
        item = map_catalog_resource(record(), source)
        assert item.name == source.default_name
        assert item.type == source.resource_type
        assert item.program == "general"
        assert item.file_url is None
        assert item.size_mb is None
        assert item.bookmarked is False

    def test_link_preferred_over_attachment(self):
        item = map_catalog_resource(
            record(
                {
                    FORMS.name_field: "Consent",
                    FORMS.link_field: "https://link",
                    FORMS.file_field: [{"url": "https://file", "size": 524288}],
                    FORMS.category_field: "Consent Forms",
                    FORMS.program_field: "TNT",
                }
            ),
            FORMS,
        )
        assert item.file_url == "https://link"
        assert item.size_mb == 0.5
        assert item.category == "Consent Forms"
        assert item.program == "tnt"

    def test_attachment_used_without_link(self):
        item = map_catalog_resource(
            record({ADDITIONAL.file_field: [{"url": "https://file"}]}), ADDITIONAL
        )
        assert item.file_url == "https://file"

    def test_lookup_program_list(self):
        item = map_catalog_resource(record({TRAINING.program_field: ["MTMTFT"]}), TRAINING)
        assert item.program == "mtmtft"

    def test_table_without_program_is_general(self):
        item = map_catalog_resource(record({HANDOUTS.name_field: "Handout"}), HANDOUTS)
        assert item.program == "general"

    def test_forced_program(self):
        assert map_catalog_resource(record(), FORMS, program="oc").program == "oc"


class TestMapCatalogProgram:
    def test_counts_linked_resources(self):
        program = map_catalog_program(
            record(
                {
                    ProgramFields.SLUG: "TNT",
                    ProgramFields.NAME: "Test and Treat",
                    ProgramFields.TRAINING_LINKS: ["a", "b"],
                    ProgramFields.PROTOCOL_LINKS: ["c"],
                    ProgramFields.FORM_LINKS: ["d"],
                    ProgramFields.ADDITIONAL_LINKS: ["e"],
                }
            )
        )
        assert program.slug == "tnt"
        assert program.icon == "TestTube2"
        assert program.resource_count == 5
        assert program.last_updated_iso == "2025-03-01T00:00:00.000Z"

    def test_defaults(self):
        program = map_catalog_program(record())
        assert program.slug == "tmm"
        assert program.name == "Program"
        assert program.icon == "Layers"
        assert program.resource_count == 0


class TestMapMember:
    def test_full_member(self):
        member = map_member(
            record(
                {
                    MemberFields.EMAIL: "a@b.com",
                    MemberFields.PHARMACY_NAME: "Corner Rx",
                    MemberFields.SUBSCRIPTION_STATUS: "Trial",
                    MemberFields.LAST_ACTIVITY: "2025-05-05",
                }
            )
        )
        assert member.email == "a@b.com"
        assert member.pharmacy_name == "Corner Rx"
        assert member.subscription_status == SubscriptionStatus.TRIAL
        assert member.last_login_iso == "2025-05-05"

    def test_defaults(self):
        member = map_member(record(), fallback_email="x@y.com")
        assert member.email == "x@y.com"
        assert member.subscription_status == SubscriptionStatus.ACTIVE
        assert member.last_login_iso == "2025-03-01T00:00:00.000Z"

    def test_unknown_status_defaults_to_active(self):
        member = map_member(record({MemberFields.SUBSCRIPTION_STATUS: "Lapsed"}))
        assert member.subscription_status == SubscriptionStatus.ACTIVE
