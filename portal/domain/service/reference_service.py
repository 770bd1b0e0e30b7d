"""Reference domain service: who points at an option, and re-pointing them."""

import logfire

from portal.config import MetadataSettings
from portal.domain.model import ContentItem, Course, OptionUsage
from portal.domain.model.catalog import CatalogEntity
from portal.domain.repository import (
    CatalogRepository,
    ContentItemRepository,
    CourseRepository,
)
from portal.domain.value import MetadataGroupKey, OptionId

from .base import Service
from .batch import BatchBudget, scan_pages


class ReferenceService(Service):
    """Domain service for Course and Content item references to options.

    There is no reverse index, so every operation walks both tables filtered
    by the group's canonical field.
    """

    def __init__(
        self,
        course_repository: CourseRepository,
        content_item_repository: ContentItemRepository,
        settings: MetadataSettings,
    ) -> None:
        """Initialize reference service.

        Args:
            course_repository: Course repository
            content_item_repository: Content item repository
            settings: Metadata settings (sample size, batch limits)
        """
        self.course_repository = course_repository
        self.content_item_repository = content_item_repository
        self.settings = settings

    def _tables(
        self, group_key: MetadataGroupKey
    ) -> list[tuple[type[CatalogEntity], CatalogRepository]]:
        tables: list[tuple[type[CatalogEntity], CatalogRepository]] = [
            (Course, self.course_repository),
            (ContentItem, self.content_item_repository),
        ]
        # Badges only exist on courses
        return [
            (entity_type, repository)
            for entity_type, repository in tables
            if entity_type.reference_field(group_key) is not None
        ]

    async def get_usage(
        self, group_key: MetadataGroupKey, option_id: OptionId
    ) -> OptionUsage:
        """Count Courses and Content items referencing an option.

        Args:
            group_key: Group of the option (selects the canonical field)
            option_id: Option to count references to

        Returns:
            Counts plus a bounded sample of referencing IDs

        Raises:
            BatchBudgetExceededError: If the tables could not be walked in budget
        """
        with logfire.span(
            "reference_service.get_usage",
            group_key=group_key.value,
            option_id=option_id,
        ):
            budget = BatchBudget.from_settings("usage", self.settings)
            sample_size = self.settings.usage_sample_size
            counts: dict[type[CatalogEntity], int] = {Course: 0, ContentItem: 0}
            samples: dict[type[CatalogEntity], list[str]] = {
                Course: [],
                ContentItem: [],
            }

            for entity_type, repository in self._tables(group_key):
                async for page in scan_pages(
                    repository,
                    budget,
                    self.settings.batch_page_size,
                    reference=(group_key, option_id),
                ):
                    for entity in page:
                        counts[entity_type] += 1
                        if len(samples[entity_type]) < sample_size:
                            samples[entity_type].append(entity.entity_id)

            usage = OptionUsage(
                used_by_courses=counts[Course],
                used_by_resources=counts[ContentItem],
                sample_course_ids=samples[Course],
                sample_resource_ids=samples[ContentItem],
            )
            logfire.info(
                "Option usage counted",
                option_id=option_id,
                used_by_courses=usage.used_by_courses,
                used_by_resources=usage.used_by_resources,
                pages=budget.pages,
            )
            return usage

    async def repoint_references(
        self,
        group_key: MetadataGroupKey,
        source_id: OptionId,
        target_id: OptionId,
    ) -> tuple[int, int]:
        """Move every reference to `source_id` onto `target_id`.

        Not atomic: entities are rewritten one at a time. Re-running after a
        failure only touches entities that still reference the source.

        Args:
            group_key: Group both options belong to
            source_id: Option whose references are moved
            target_id: Option that receives the references

        Returns:
            (courses rewritten, content items rewritten)

        Raises:
            BatchBudgetExceededError: If the tables could not be walked in budget
        """
        with logfire.span(
            "reference_service.repoint_references",
            group_key=group_key.value,
            source_id=source_id,
            target_id=target_id,
        ):
            budget = BatchBudget.from_settings("merge", self.settings)
            rewritten: dict[type[CatalogEntity], int] = {Course: 0, ContentItem: 0}

            for entity_type, repository in self._tables(group_key):
                async for page in scan_pages(
                    repository,
                    budget,
                    self.settings.batch_page_size,
                    reference=(group_key, source_id),
                ):
                    for entity in page:
                        changes = entity.repoint(group_key, source_id, target_id)
                        if not changes:
                            continue
                        await repository.update_fields(entity.entity_id, changes)
                        rewritten[entity_type] += 1

            logfire.info(
                "References repointed",
                source_id=source_id,
                target_id=target_id,
                courses=rewritten[Course],
                resources=rewritten[ContentItem],
            )
            return rewritten[Course], rewritten[ContentItem]
