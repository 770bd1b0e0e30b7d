"""Unit tests for MetadataService."""

from datetime import UTC, datetime

import pytest

from portal.domain.error import (
    ConflictError,
    InvalidMergeError,
    NotFoundError,
    OptionInUseError,
    ValidationError,
)
from portal.domain.repository import (
    ContentItemRepository,
    CourseRepository,
    MetadataOptionRepository,
    OptionKey,
)
from portal.domain.service import MetadataService, decode_cursor, encode_cursor
from portal.domain.value import MetadataGroupKey, OptionId, OptionStatus
from tests.conftest import make_content_item, make_course, make_option
from tests.harness import create_env_fixture

# Unit test fixture
unit_env = create_env_fixture()

TOPIC = MetadataGroupKey.TOPIC_TAG


class TestCreateOption:
    """Tests for create_option."""

    @pytest.mark.asyncio
    async def test_slug_derived_from_label(self, unit_env):
        service = await unit_env.get(MetadataService)

        option = await service.create_option(TOPIC, "  Sales Enablement ", "admin-1")

        assert option.label == "Sales Enablement"
        assert option.slug.root == "sales-enablement"
        assert option.status == OptionStatus.ACTIVE
        assert option.created_by == option.updated_by == "admin-1"
        assert option.deleted_at is None

    @pytest.mark.asyncio
    async def test_duplicate_slug_in_same_group_conflicts(self, unit_env):
        service = await unit_env.get(MetadataService)
        await service.create_option(TOPIC, "Onboarding", "admin-1")

        with pytest.raises(ConflictError, match="onboarding"):
            await service.create_option(TOPIC, "Onboarding!", "admin-1")

    @pytest.mark.asyncio
    async def test_same_slug_allowed_in_other_group(self, unit_env):
        service = await unit_env.get(MetadataService)
        await service.create_option(TOPIC, "Onboarding", "admin-1")

        option = await service.create_option(
            MetadataGroupKey.AUDIENCE, "Onboarding", "admin-1"
        )

        assert option.slug.root == "onboarding"

    @pytest.mark.asyncio
    async def test_punctuation_and_space_labels_do_not_collide(self, unit_env):
        service = await unit_env.get(MetadataService)

        first = await service.create_option(TOPIC, "Q&A", "admin-1")
        second = await service.create_option(TOPIC, "Q A", "admin-1")

        assert first.slug.root == "qa"
        assert second.slug.root == "q-a"

    @pytest.mark.asyncio
    async def test_deleted_option_still_holds_its_slug(self, unit_env):
        service = await unit_env.get(MetadataService)
        option = await service.create_option(TOPIC, "Onboarding", "admin-1")
        await service.delete_option(TOPIC, option.option_id, "admin-1")

        with pytest.raises(ConflictError):
            await service.create_option(TOPIC, "Onboarding", "admin-1")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("label", ["", "   "])
    async def test_label_required(self, unit_env, label):
        service = await unit_env.get(MetadataService)

        with pytest.raises(ValidationError):
            await service.create_option(TOPIC, label, "admin-1")

    @pytest.mark.asyncio
    async def test_invalid_explicit_slug(self, unit_env):
        service = await unit_env.get(MetadataService)

        with pytest.raises(ValidationError):
            await service.create_option(TOPIC, "Onboarding", "admin-1", slug="Bad Slug")

    @pytest.mark.asyncio
    async def test_description_limit(self, unit_env):
        service = await unit_env.get(MetadataService)

        with pytest.raises(ValidationError):
            await service.create_option(
                TOPIC, "Onboarding", "admin-1", short_description="x" * 141
            )

    @pytest.mark.asyncio
    async def test_product_parent_must_be_product_suite(self, unit_env):
        service = await unit_env.get(MetadataService)
        suite = await service.create_option(
            MetadataGroupKey.PRODUCT_SUITE, "Sales Cloud", "admin-1"
        )
        topic = await service.create_option(TOPIC, "Pricing", "admin-1")

        product = await service.create_option(
            MetadataGroupKey.PRODUCT, "CPQ", "admin-1", parent_id=suite.option_id
        )
        assert product.parent_id == suite.option_id

        with pytest.raises(ValidationError, match="product suite"):
            await service.create_option(
                MetadataGroupKey.PRODUCT, "Billing", "admin-1", parent_id=topic.option_id
            )

    @pytest.mark.asyncio
    async def test_missing_parent(self, unit_env):
        service = await unit_env.get(MetadataService)

        with pytest.raises(ValidationError):
            await service.create_option(
                TOPIC, "Child", "admin-1", parent_id=OptionId("missing")
            )


class TestListOptions:
    """Tests for list_options."""

    @pytest.mark.asyncio
    async def test_ordering_and_default_visibility(self, unit_env):
        service = await unit_env.get(MetadataService)
        repo = await unit_env.get(MetadataOptionRepository)
        await repo.save(make_option("Zeta", sort_order=0))
        await repo.save(make_option("Alpha", sort_order=1))
        await repo.save(make_option("Beta", sort_order=0))
        await repo.save(make_option("Old", status=OptionStatus.ARCHIVED))
        await repo.save(make_option("Gone", deleted_at=datetime.now(UTC)))
        await repo.save(make_option("Other group", group_key=MetadataGroupKey.BADGE))

        page = await service.list_options(TOPIC)

        assert [o.label for o in page.options] == ["Beta", "Zeta", "Alpha"]
        assert page.next_cursor is None

    @pytest.mark.asyncio
    async def test_include_archived_and_deleted(self, unit_env):
        service = await unit_env.get(MetadataService)
        repo = await unit_env.get(MetadataOptionRepository)
        await repo.save(make_option("Live"))
        await repo.save(make_option("Old", status=OptionStatus.ARCHIVED))
        await repo.save(make_option("Gone", deleted_at=datetime.now(UTC)))

        archived = await service.list_options(TOPIC, include_archived=True)
        everything = await service.list_options(
            TOPIC, include_archived=True, include_deleted=True
        )

        assert {o.label for o in archived.options} == {"Live", "Old"}
        assert {o.label for o in everything.options} == {"Live", "Old", "Gone"}

    @pytest.mark.asyncio
    async def test_query_matches_label_or_slug_case_insensitively(self, unit_env):
        service = await unit_env.get(MetadataService)
        repo = await unit_env.get(MetadataOptionRepository)
        await repo.save(make_option("Onboarding"))
        await repo.save(make_option("New Hire", slug="onboarding-new-hire"))
        await repo.save(make_option("Pricing"))

        page = await service.list_options(TOPIC, query="ONBOARD")

        assert {o.label for o in page.options} == {"Onboarding", "New Hire"}

    @pytest.mark.asyncio
    async def test_parent_scope_includes_unparented(self, unit_env):
        service = await unit_env.get(MetadataService)
        repo = await unit_env.get(MetadataOptionRepository)
        suite_a = await repo.save(
            make_option("Suite A", group_key=MetadataGroupKey.PRODUCT_SUITE)
        )
        suite_b = await repo.save(
            make_option("Suite B", group_key=MetadataGroupKey.PRODUCT_SUITE)
        )
        product = MetadataGroupKey.PRODUCT
        await repo.save(make_option("A1", group_key=product, parent_id=suite_a.option_id))
        await repo.save(make_option("B1", group_key=product, parent_id=suite_b.option_id))
        await repo.save(make_option("Loose", group_key=product))

        page = await service.list_options(product, parent_id=suite_a.option_id)

        assert {o.label for o in page.options} == {"A1", "Loose"}

    @pytest.mark.asyncio
    async def test_parent_scope_falls_back_to_whole_group(self, unit_env):
        service = await unit_env.get(MetadataService)
        repo = await unit_env.get(MetadataOptionRepository)
        suite_a, suite_b, suite_c = [
            await repo.save(make_option(label, group_key=MetadataGroupKey.PRODUCT_SUITE))
            for label in ("Suite A", "Suite B", "Suite C")
        ]
        product = MetadataGroupKey.PRODUCT
        await repo.save(make_option("A1", group_key=product, parent_id=suite_a.option_id))
        await repo.save(make_option("B1", group_key=product, parent_id=suite_b.option_id))

        page = await service.list_options(product, parent_id=suite_c.option_id)

        assert {o.label for o in page.options} == {"A1", "B1"}

    @pytest.mark.asyncio
    async def test_deleted_child_keeps_parent_scope(self, unit_env):
        service = await unit_env.get(MetadataService)
        repo = await unit_env.get(MetadataOptionRepository)
        suite = await repo.save(
            make_option("Suite A", group_key=MetadataGroupKey.PRODUCT_SUITE)
        )
        product = MetadataGroupKey.PRODUCT
        await repo.save(
            make_option(
                "Gone",
                group_key=product,
                parent_id=suite.option_id,
                deleted_at=datetime.now(UTC),
            )
        )
        await repo.save(make_option("Other", group_key=product, parent_id=OptionId("x")))

        page = await service.list_options(product, parent_id=suite.option_id)

        # A deleted child still anchors the scope
        assert page.options == []

    @pytest.mark.asyncio
    async def test_cursor_pagination_walks_every_option_once(self, unit_env):
        service = await unit_env.get(MetadataService)
        repo = await unit_env.get(MetadataOptionRepository)
        for index in range(5):
            await repo.save(make_option(f"Topic {index}", sort_order=index))

        first = await service.list_options(TOPIC, limit=2)
        second = await service.list_options(TOPIC, limit=2, cursor=first.next_cursor)
        third = await service.list_options(TOPIC, limit=2, cursor=second.next_cursor)

        labels = [o.label for page in (first, second, third) for o in page.options]
        assert labels == [f"Topic {index}" for index in range(5)]
        assert third.next_cursor is None

    @pytest.mark.asyncio
    async def test_invalid_cursor(self, unit_env):
        service = await unit_env.get(MetadataService)

        with pytest.raises(ValidationError, match="cursor"):
            await service.list_options(TOPIC, cursor="not-a-cursor")

    def test_cursor_is_opaque_and_reversible(self):
        key = OptionKey(sort_order=3, label="Onboarding", option_id=OptionId("abc"))

        token = encode_cursor(key)

        assert "Onboarding" not in token
        assert decode_cursor(token) == key


class TestUpdateOption:
    """Tests for update_option."""

    @pytest.mark.asyncio
    async def test_only_provided_fields_change_and_none_clears(self, unit_env):
        service = await unit_env.get(MetadataService)
        option = await service.create_option(
            TOPIC, "Onboarding", "admin-1", color="#ff0000", short_description="Start"
        )

        updated = await service.update_option(
            option.option_id, {"color": None, "sort_order": 4}, "admin-2"
        )

        assert updated.color is None
        assert updated.sort_order == 4
        assert updated.short_description == "Start"
        assert updated.label == "Onboarding"
        assert updated.updated_by == "admin-2"

    @pytest.mark.asyncio
    async def test_archive_and_unarchive_via_status(self, unit_env):
        service = await unit_env.get(MetadataService)
        option = await service.create_option(TOPIC, "Onboarding", "admin-1")

        archived = await service.update_option(
            option.option_id, {"status": OptionStatus.ARCHIVED}, "admin-1"
        )
        assert archived.status == OptionStatus.ARCHIVED
        assert archived.archived_at is not None

        restored = await service.update_option(
            option.option_id, {"status": "active"}, "admin-1"
        )
        assert restored.status == OptionStatus.ACTIVE
        assert restored.archived_at is None

    @pytest.mark.asyncio
    async def test_archived_at_alone_syncs_status(self, unit_env):
        service = await unit_env.get(MetadataService)
        option = await service.create_option(TOPIC, "Onboarding", "admin-1")
        when = datetime(2026, 1, 5, tzinfo=UTC)

        archived = await service.update_option(
            option.option_id, {"archived_at": when}, "admin-1"
        )

        assert archived.status == OptionStatus.ARCHIVED
        assert archived.archived_at == when

    @pytest.mark.asyncio
    async def test_restore_deleted_option(self, unit_env):
        service = await unit_env.get(MetadataService)
        option = await service.create_option(TOPIC, "Onboarding", "admin-1")
        await service.delete_option(TOPIC, option.option_id, "admin-1")

        restored = await service.update_option(
            option.option_id, {"deleted_at": None}, "admin-1"
        )

        assert restored.deleted_at is None

    @pytest.mark.asyncio
    async def test_slug_change_conflicts_within_group(self, unit_env):
        service = await unit_env.get(MetadataService)
        await service.create_option(TOPIC, "Onboarding", "admin-1")
        other = await service.create_option(TOPIC, "Pricing", "admin-1")

        with pytest.raises(ConflictError):
            await service.update_option(other.option_id, {"slug": "onboarding"}, "admin-1")

    @pytest.mark.asyncio
    async def test_cannot_be_own_parent(self, unit_env):
        service = await unit_env.get(MetadataService)
        option = await service.create_option(TOPIC, "Onboarding", "admin-1")

        with pytest.raises(ValidationError):
            await service.update_option(
                option.option_id, {"parent_id": option.option_id}, "admin-1"
            )

    @pytest.mark.asyncio
    async def test_unknown_option(self, unit_env):
        service = await unit_env.get(MetadataService)

        with pytest.raises(NotFoundError):
            await service.update_option(OptionId("missing"), {"label": "X"}, "admin-1")


class TestDeleteOption:
    """Tests for delete_option and usage."""

    @pytest.mark.asyncio
    async def test_in_use_option_is_refused_until_forced(self, unit_env):
        service = await unit_env.get(MetadataService)
        courses = await unit_env.get(CourseRepository)
        option = await service.create_option(TOPIC, "Onboarding", "admin-1")
        await courses.save(make_course("c1", topic_tag_ids=[option.option_id]))
        await courses.save(make_course("c2", topic_tag_ids=["x", option.option_id]))
        await courses.save(make_course("c3", topic_tag_ids=["x"]))

        with pytest.raises(OptionInUseError) as exc_info:
            await service.delete_option(TOPIC, option.option_id, "admin-1")
        assert exc_info.value.used_by_courses == 2
        assert exc_info.value.used_by_resources == 0
        assert sorted(exc_info.value.sample_course_ids) == ["c1", "c2"]

        deleted = await service.delete_option(
            TOPIC, option.option_id, "admin-1", force=True
        )
        assert deleted.deleted_at is not None
        # References are left alone
        course = await courses.find_by_id("c1")
        assert course.topic_tag_ids == [option.option_id]

    @pytest.mark.asyncio
    async def test_unreferenced_option_is_soft_deleted(self, unit_env):
        service = await unit_env.get(MetadataService)
        option = await service.create_option(TOPIC, "Onboarding", "admin-1")

        await service.delete_option(TOPIC, option.option_id, "admin-1")

        stored = await service.get_option(option.option_id)
        assert stored.is_deleted
        page = await service.list_options(TOPIC)
        assert page.options == []

    @pytest.mark.asyncio
    async def test_option_of_other_group_is_not_found(self, unit_env):
        service = await unit_env.get(MetadataService)
        option = await service.create_option(TOPIC, "Onboarding", "admin-1")

        with pytest.raises(NotFoundError):
            await service.delete_option(
                MetadataGroupKey.AUDIENCE, option.option_id, "admin-1"
            )

    @pytest.mark.asyncio
    async def test_usage_counts_both_tables(self, unit_env):
        service = await unit_env.get(MetadataService)
        courses = await unit_env.get(CourseRepository)
        content = await unit_env.get(ContentItemRepository)
        option = await service.create_option(
            MetadataGroupKey.PRODUCT_SUITE, "Sales Cloud", "admin-1"
        )
        await courses.save(make_course("c1", product_suite_id=option.option_id))
        await content.save(make_content_item("r1", product_suite_id=option.option_id))
        await content.save(make_content_item("r2", product_suite_id="other"))

        usage = await service.get_usage(MetadataGroupKey.PRODUCT_SUITE, option.option_id)

        assert usage.used_by_courses == 1
        assert usage.used_by_resources == 1
        assert usage.sample_course_ids == ["c1"]
        assert usage.sample_resource_ids == ["r1"]

    @pytest.mark.asyncio
    async def test_badges_are_counted_on_courses_only(self, unit_env):
        service = await unit_env.get(MetadataService)
        courses = await unit_env.get(CourseRepository)
        badge = await service.create_option(MetadataGroupKey.BADGE, "Expert", "admin-1")
        await courses.save(make_course("c1", badge_ids=[badge.option_id]))

        usage = await service.get_usage(MetadataGroupKey.BADGE, badge.option_id)

        assert usage.used_by_courses == 1
        assert usage.used_by_resources == 0


class TestMergeOptions:
    """Tests for merge_options."""

    @pytest.mark.asyncio
    async def test_merge_rewrites_references_and_archives_source(self, unit_env):
        service = await unit_env.get(MetadataService)
        courses = await unit_env.get(CourseRepository)
        content = await unit_env.get(ContentItemRepository)
        source = await service.create_option(TOPIC, "Onboard", "admin-1")
        target = await service.create_option(TOPIC, "Onboarding", "admin-1")
        await courses.save(make_course("c1", topic_tag_ids=[source.option_id, "x"]))
        await courses.save(
            make_course("c2", topic_tag_ids=[target.option_id, source.option_id])
        )
        await content.save(make_content_item("r1", topic_tag_ids=[source.option_id]))

        result = await service.merge_options(
            TOPIC, source.option_id, target.option_id, "admin-1"
        )

        assert result.migrated_courses == 2
        assert result.migrated_resources == 1
        assert (await courses.find_by_id("c1")).topic_tag_ids == [target.option_id, "x"]
        assert (await courses.find_by_id("c2")).topic_tag_ids == [target.option_id]
        assert (await content.find_by_id("r1")).topic_tag_ids == [target.option_id]

        retired = await service.get_option(source.option_id)
        assert retired.status == OptionStatus.ARCHIVED
        assert retired.deleted_at is None
        usage = await service.get_usage(TOPIC, source.option_id)
        assert usage.total == 0

    @pytest.mark.asyncio
    async def test_merge_with_delete_source(self, unit_env):
        service = await unit_env.get(MetadataService)
        courses = await unit_env.get(CourseRepository)
        source = await service.create_option(
            MetadataGroupKey.PRODUCT_SUITE, "Sales", "admin-1"
        )
        target = await service.create_option(
            MetadataGroupKey.PRODUCT_SUITE, "Sales Cloud", "admin-1"
        )
        await courses.save(make_course("c1", product_suite_id=source.option_id))

        result = await service.merge_options(
            MetadataGroupKey.PRODUCT_SUITE,
            source.option_id,
            target.option_id,
            "admin-1",
            delete_source=True,
        )

        assert result.migrated_courses == 1
        assert (await courses.find_by_id("c1")).product_suite_id == target.option_id
        assert (await service.get_option(source.option_id)).is_deleted

    @pytest.mark.asyncio
    async def test_cross_group_merge_is_rejected(self, unit_env):
        service = await unit_env.get(MetadataService)
        courses = await unit_env.get(CourseRepository)
        source = await service.create_option(TOPIC, "Onboarding", "admin-1")
        target = await service.create_option(
            MetadataGroupKey.AUDIENCE, "New Hires", "admin-1"
        )
        await courses.save(make_course("c1", topic_tag_ids=[source.option_id]))

        with pytest.raises(InvalidMergeError):
            await service.merge_options(
                TOPIC, source.option_id, target.option_id, "admin-1"
            )

        # Nothing was touched
        assert (await courses.find_by_id("c1")).topic_tag_ids == [source.option_id]
        assert (await service.get_option(source.option_id)).status == OptionStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_merge_into_self(self, unit_env):
        service = await unit_env.get(MetadataService)
        option = await service.create_option(TOPIC, "Onboarding", "admin-1")

        with pytest.raises(InvalidMergeError):
            await service.merge_options(
                TOPIC, option.option_id, option.option_id, "admin-1"
            )

    @pytest.mark.asyncio
    async def test_merge_into_deleted_target(self, unit_env):
        service = await unit_env.get(MetadataService)
        source = await service.create_option(TOPIC, "Onboard", "admin-1")
        target = await service.create_option(TOPIC, "Onboarding", "admin-1")
        await service.delete_option(TOPIC, target.option_id, "admin-1")

        with pytest.raises(InvalidMergeError):
            await service.merge_options(
                TOPIC, source.option_id, target.option_id, "admin-1"
            )

    @pytest.mark.asyncio
    async def test_merge_missing_target(self, unit_env):
        service = await unit_env.get(MetadataService)
        source = await service.create_option(TOPIC, "Onboard", "admin-1")

        with pytest.raises(NotFoundError):
            await service.merge_options(
                TOPIC, source.option_id, OptionId("missing"), "admin-1"
            )
