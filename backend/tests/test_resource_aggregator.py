"""Tests for catalog aggregation, client-side filters and single-resource probing."""

import pytest

from conftest import airtable_error, airtable_record
from portal.airtable_schema import (
    FORMS,
    HANDOUTS,
    PROTOCOLS,
    RESOURCE_PROBE_ORDER,
    TRAINING,
    ProgramFields,
    Tables,
)
from portal.errors import AirtableError, NotFoundError
from portal.schemas.resources import ResourceFilters, ResourceItem, ResourceType
from portal.services.resource_aggregator import (
    ResourceAggregator,
    apply_filters,
    filter_by_program,
    sort_resources,
)

SOURCES = (FORMS, PROTOCOLS, TRAINING)


def item(id_, name, **kwargs) -> ResourceItem:
    return ResourceItem(id=id_, name=name, **kwargs)


@pytest.fixture
def catalog(fake_airtable):
    """Two records in each of the forms, protocols and training tables."""
    fake_airtable.add_table(
        Tables.FORMS,
        [
            airtable_record("recF1", {FORMS.name_field: "Enrollment Form", FORMS.program_field: "TMM"}),
            airtable_record("recF2", {FORMS.name_field: "Flu Consent", FORMS.program_field: ["tnt"]}),
        ],
    )
    fake_airtable.add_table(
        Tables.PROTOCOLS,
        [
            airtable_record("recP1", {PROTOCOLS.name_field: "Sync Protocol", PROTOCOLS.program_field: "tmm"}),
            airtable_record("recP2", {PROTOCOLS.name_field: "Strep Protocol", PROTOCOLS.program_field: "tnt"}),
        ],
    )
    fake_airtable.add_table(
        Tables.TRAINING,
        [
            airtable_record("recT1", {TRAINING.name_field: "Sync Basics"}),
            airtable_record("recT2", {TRAINING.name_field: "A1C Testing", TRAINING.program_field: "a1c"}),
        ],
    )
    return fake_airtable


@pytest.fixture
def aggregator(airtable_client):
    return ResourceAggregator(airtable_client, sources=SOURCES)


class TestFetchAll:
    async def test_concatenates_sources_in_order_with_fixed_types(self, catalog, aggregator):
        items = await aggregator.fetch_all()

        assert [i.id for i in items] == ["recF1", "recF2", "recP1", "recP2", "recT1", "recT2"]
        assert [i.type for i in items] == [
            ResourceType.DOCUMENTATION_FORMS,
            ResourceType.DOCUMENTATION_FORMS,
            ResourceType.PROTOCOLS,
            ResourceType.PROTOCOLS,
            ResourceType.TRAINING_MATERIALS,
            ResourceType.TRAINING_MATERIALS,
        ]

    async def test_reads_by_field_id(self, catalog, aggregator):
        await aggregator.fetch_all()
        assert all(r.url.params["returnFieldsByFieldId"] == "true" for r in catalog.requests)

    async def test_one_failing_table_fails_the_call(self, catalog, aggregator):
        catalog.queue(airtable_error(500, "SERVER_ERROR", "boom"))

        with pytest.raises(AirtableError):
            await aggregator.fetch_all()


class TestGetResources:
    async def test_no_filters_sorts_by_name(self, catalog, aggregator):
        items = await aggregator.get_resources()
        assert [i.name for i in items] == [
            "A1C Testing",
            "Enrollment Form",
            "Flu Consent",
            "Strep Protocol",
            "Sync Basics",
            "Sync Protocol",
        ]

    async def test_type_filter(self, catalog, aggregator):
        items = await aggregator.get_resources(ResourceFilters(type=ResourceType.PROTOCOLS))
        assert {i.id for i in items} == {"recP1", "recP2"}
        assert all(i.type == ResourceType.PROTOCOLS for i in items)

    async def test_type_list_filter(self, catalog, aggregator):
        items = await aggregator.get_resources(
            ResourceFilters(type=["Protocols", "Training Materials"])
        )
        assert {i.id for i in items} == {"recP1", "recP2", "recT1", "recT2"}

    async def test_program_filter_is_case_insensitive(self, catalog, aggregator):
        items = await aggregator.get_resources(ResourceFilters(program="TMM"))
        assert {i.id for i in items} == {"recF1", "recP1"}

    async def test_general_program_matches_untagged(self, catalog, aggregator):
        items = await aggregator.get_resources(ResourceFilters(program="general"))
        assert [i.id for i in items] == ["recT1"]

    async def test_program_list(self, catalog, aggregator):
        items = await aggregator.get_resources(ResourceFilters(program=["tnt", "a1c"]))
        assert {i.id for i in items} == {"recF2", "recP2", "recT2"}

    async def test_search_on_name(self, catalog, aggregator):
        items = await aggregator.get_resources(ResourceFilters(search="SYNC"))
        assert [i.id for i in items] == ["recT1", "recP1"]

    async def test_limit_and_offset(self, catalog, aggregator):
        items = await aggregator.get_resources(ResourceFilters(limit=2, offset=1))
        assert [i.name for i in items] == ["Enrollment Form", "Flu Consent"]


class TestGetProgramsAndForms:
    async def test_programs(self, fake_airtable, aggregator):
        fake_airtable.add_table(
            Tables.PROGRAMS,
            [
                airtable_record(
                    "recProg",
                    {
                        ProgramFields.NAME: "MTM The Future Today",
                        ProgramFields.SLUG: "mtmtft",
                        ProgramFields.FORM_LINKS: ["a", "b"],
                    },
                )
            ],
        )

        programs = await aggregator.get_programs()

        assert len(programs) == 1
        assert programs[0].slug == "mtmtft"
        assert programs[0].resource_count == 2

    async def test_program_documentation_forms(self, fake_airtable, aggregator):
        fake_airtable.add_table(
            Tables.FORMS,
            [airtable_record("recF1", {FORMS.name_field: "CMR Form"})],
        )

        forms = await aggregator.get_program_documentation_forms("mtmtft")

        assert [f.id for f in forms] == ["recF1"]
        assert forms[0].program == "mtmtft"
        assert forms[0].type == ResourceType.DOCUMENTATION_FORMS
        assert fake_airtable.requests[0].url.params["filterByFormula"] == "{programSlug}='mtmtft'"


class TestGetResourceById:
    async def test_found_in_first_table(self, catalog, aggregator):
        resource = await aggregator.get_resource_by_id("recF2")

        assert resource.name == "Flu Consent"
        assert len(catalog.requests) == 1

    async def test_probes_tables_in_order(self, fake_airtable, aggregator):
        fake_airtable.add_record(
            Tables.HANDOUTS, airtable_record("recH1", {HANDOUTS.name_field: "Diabetes Handout"})
        )

        resource = await aggregator.get_resource_by_id("recH1")

        assert resource.type == ResourceType.PATIENT_HANDOUTS
        assert resource.name == "Diabetes Handout"
        probed = [r.url.path.split("/")[3] for r in fake_airtable.requests]
        assert probed == [s.table_id for s in RESOURCE_PROBE_ORDER[:5]]

    async def test_permission_and_invalid_id_errors_count_as_misses(self, fake_airtable, aggregator):
        fake_airtable.queue(
            airtable_error(403, "INVALID_PERMISSIONS", "no"),
            airtable_error(422, "INVALID_REQUEST", "bad id"),
        )
        fake_airtable.add_record(Tables.TRAINING, airtable_record("recT9", {TRAINING.name_field: "Video"}))

        resource = await aggregator.get_resource_by_id("recT9")

        assert resource.type == ResourceType.TRAINING_MATERIALS

    async def test_not_found_anywhere(self, fake_airtable, aggregator):
        with pytest.raises(NotFoundError) as exc_info:
            await aggregator.get_resource_by_id("recNope")

        assert exc_info.value.status_code == 404
        assert exc_info.value.code == "NOT_FOUND"
        assert len(fake_airtable.requests) == len(RESOURCE_PROBE_ORDER)

    async def test_other_errors_propagate(self, fake_airtable, aggregator):
        fake_airtable.queue(airtable_error(500, "SERVER_ERROR", "boom"))

        with pytest.raises(AirtableError) as exc_info:
            await aggregator.get_resource_by_id("recX")

        assert exc_info.value.status_code == 500
        assert len(fake_airtable.requests) == 1


class TestSorting:
    def test_ties_keep_input_order_ascending(self):
        items = [item("a", "Same"), item("b", "same"), item("c", "Alpha")]
        assert [i.id for i in sort_resources(items, "name", "asc")] == ["c", "a", "b"]

    def test_ties_keep_input_order_descending(self):
        items = [item("a", "Same"), item("b", "same"), item("c", "Alpha")]
        assert [i.id for i in sort_resources(items, "name", "desc")] == ["a", "b", "c"]

    def test_download_count_missing_is_zero(self):
        items = [item("a", "A", download_count=5), item("b", "B"), item("c", "C", download_count=1)]
        assert [i.id for i in sort_resources(items, "downloadCount", "desc")] == ["a", "c", "b"]

    def test_last_updated(self):
        items = [
            item("a", "A", last_updated_iso="2025-02-01"),
            item("b", "B", last_updated_iso="2025-01-01"),
            item("c", "C"),
        ]
        assert [i.id for i in sort_resources(items, "lastUpdated")] == ["c", "b", "a"]

    def test_category_case_insensitive(self):
        items = [item("a", "A", category="beta"), item("b", "B", category="Alpha")]
        assert [i.id for i in sort_resources(items, "category")] == ["b", "a"]

    def test_unknown_key_sorts_by_name(self):
        items = [item("a", "Zed"), item("b", "Alpha")]
        assert [i.id for i in sort_resources(items, "bogus")] == ["b", "a"]


class TestApplyFilters:
    def test_missing_program_counts_as_general(self):
        items = [item("a", "A", program=None), item("b", "B", program="tmm")]
        assert [i.id for i in filter_by_program(items, "GENERAL")] == ["a"]

    def test_empty_program_list_is_no_constraint(self):
        items = [item("a", "A"), item("b", "B")]
        assert filter_by_program(items, []) == items

    def test_zero_limit(self):
        items = [item("a", "A")]
        assert apply_filters(items, ResourceFilters(limit=0)) == []

    def test_offset_past_end(self):
        items = [item("a", "A")]
        assert apply_filters(items, ResourceFilters(offset=5)) == []
