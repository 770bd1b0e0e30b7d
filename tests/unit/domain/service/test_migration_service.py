"""Unit tests for MigrationService."""

import pytest

from portal.domain.error import ValidationError
from portal.domain.repository import (
    ContentItemRepository,
    CourseRepository,
    MetadataOptionRepository,
)
from portal.domain.service import MigrationMapping, MigrationService, migration_changes
from portal.domain.value import LegacyKey, MetadataGroupKey
from tests.conftest import make_content_item, make_course, make_option
from tests.harness import create_env_fixture

# Unit test fixture
unit_env = create_env_fixture()


async def seed_options(unit_env):
    repo = await unit_env.get(MetadataOptionRepository)
    suite = await repo.save(
        make_option("Sales Cloud", group_key=MetadataGroupKey.PRODUCT_SUITE)
    )
    product = await repo.save(make_option("CPQ", group_key=MetadataGroupKey.PRODUCT))
    onboarding = await repo.save(make_option("Onboarding"))
    return suite, product, onboarding


class TestScan:
    """Tests for scan."""

    @pytest.mark.asyncio
    async def test_buckets_distinct_values_per_kind(self, unit_env):
        service = await unit_env.get(MigrationService)
        courses = await unit_env.get(CourseRepository)
        content = await unit_env.get(ContentItemRepository)
        await courses.save(
            make_course("c1", product="CPQ", topic_tags=["Onboarding", "Pricing"])
        )
        await courses.save(make_course("c2", legacy_product_suite="CPQ"))
        await content.save(make_content_item("r1", product="CPQ", tags=["Onboarding", ""]))

        scan = await service.scan()

        assert scan.complete
        assert scan.product["CPQ"].courses == 2
        assert scan.product["CPQ"].resources == 1
        assert scan.topic_tags["Onboarding"].courses == 1
        assert scan.topic_tags["Onboarding"].resources == 1
        assert scan.topic_tags["Pricing"].resources == 0
        assert "" not in scan.topic_tags

    @pytest.mark.asyncio
    async def test_legacy_concept_field_takes_precedence(self, unit_env):
        service = await unit_env.get(MigrationService)
        courses = await unit_env.get(CourseRepository)
        await courses.save(
            make_course("c1", product_suite="Sales", legacy_product_concept="Sales Cloud")
        )

        scan = await service.scan(LegacyKey.PRODUCT_SUITE)

        assert list(scan.product_suite) == ["Sales Cloud"]
        assert scan.product == {}
        assert scan.topic_tags == {}

    @pytest.mark.asyncio
    async def test_budget_exhaustion_marks_scan_incomplete(self, unit_env):
        service = await unit_env.get(MigrationService)
        courses = await unit_env.get(CourseRepository)
        for index in range(5):
            await courses.save(make_course(f"c{index}", product="CPQ"))
        service.settings = service.settings.model_copy(
            update={"batch_page_size": 1, "batch_max_pages": 2}
        )

        scan = await service.scan()

        assert not scan.complete
        assert scan.product["CPQ"].courses == 2


class TestApply:
    """Tests for apply."""

    @pytest.mark.asyncio
    async def test_apply_fills_empty_fields_and_is_idempotent(self, unit_env):
        service = await unit_env.get(MigrationService)
        courses = await unit_env.get(CourseRepository)
        content = await unit_env.get(ContentItemRepository)
        suite, product, onboarding = await seed_options(unit_env)
        await courses.save(
            make_course(
                "c1",
                product="CPQ",
                product_suite="Sales",
                topic_tags=["Onboarding", "onboarding"],
            )
        )
        await content.save(make_content_item("r1", tags=["Onboarding"]))
        mapping = MigrationMapping(
            product={"CPQ": product.option_id},
            product_suite={"Sales": suite.option_id},
            topic_tags={
                "Onboarding": onboarding.option_id,
                "onboarding": onboarding.option_id,
            },
        )

        preview = await service.apply(mapping, dry_run=True)
        assert (preview.courses_updated, preview.resources_updated) == (1, 1)
        assert (await courses.find_by_id("c1")).product_id is None

        result = await service.apply(mapping)
        assert (result.courses_updated, result.resources_updated) == (1, 1)
        assert result.complete

        course = await courses.find_by_id("c1")
        assert course.product_id == product.option_id
        assert course.product_suite_id == suite.option_id
        assert course.topic_tag_ids == [onboarding.option_id]
        # Legacy values are kept
        assert course.product == "CPQ"

        again = await service.apply(mapping, dry_run=True)
        assert (again.courses_updated, again.resources_updated) == (0, 0)

    @pytest.mark.asyncio
    async def test_existing_canonical_value_is_never_overwritten(self, unit_env):
        service = await unit_env.get(MigrationService)
        courses = await unit_env.get(CourseRepository)
        _, product, _ = await seed_options(unit_env)
        await courses.save(make_course("c1", product="CPQ", product_id="already-set"))

        result = await service.apply(MigrationMapping(product={"CPQ": product.option_id}))

        assert result.courses_updated == 0
        assert (await courses.find_by_id("c1")).product_id == "already-set"

    @pytest.mark.asyncio
    async def test_mapping_to_wrong_group_is_rejected(self, unit_env):
        service = await unit_env.get(MigrationService)
        suite, _, _ = await seed_options(unit_env)

        with pytest.raises(ValidationError) as exc_info:
            await service.apply(
                MigrationMapping(
                    product={"CPQ": suite.option_id},
                    topic_tags={"Onboarding": "missing"},
                )
            )

        entries = exc_info.value.details["invalid_entries"]
        assert {(e["key"], e["value"]) for e in entries} == {
            ("product", "CPQ"),
            ("topic_tags", "Onboarding"),
        }


class TestMigrationChanges:
    def test_first_mapped_value_wins_for_single_fields(self):
        course = make_course("c1", product="CPQ", legacy_product_suite="Billing")
        mapping = MigrationMapping(product={"CPQ": "opt-cpq", "Billing": "opt-billing"})

        # legacy_product_suite is read before product
        assert migration_changes(course, mapping) == {"product_id": "opt-billing"}

    def test_unmapped_values_produce_no_changes(self):
        course = make_course("c1", topic_tags=["Unknown"])
        mapping = MigrationMapping(topic_tags={"Onboarding": "opt-1"})

        assert migration_changes(course, mapping) == {}
