"""Legacy metadata migration domain service.

Courses and Content items predate the taxonomy and carry free-text values
(`product`, `legacy_product_suite`, `topic_tags`/`tags`, ...). `scan` lists
the distinct values so an operator can build a value -> option_id mapping;
`apply` writes the mapped option IDs into empty canonical fields.

Both walk the full tables. Neither is atomic, and both are safe to re-run:
`apply` never overwrites a canonical field that is already set.
"""

from typing import Any

import logfire
from pydantic import BaseModel, Field

from portal.config import MetadataSettings
from portal.domain.error import BatchBudgetExceededError, ValidationError
from portal.domain.model.catalog import CatalogEntity
from portal.domain.repository import (
    CatalogRepository,
    ContentItemRepository,
    CourseRepository,
    MetadataOptionRepository,
)
from portal.domain.value import LegacyKey, OptionId

from .base import Service
from .batch import BatchBudget, scan_pages

# Canonical field filled from each legacy family
CANONICAL_FIELDS: dict[LegacyKey, str] = {
    LegacyKey.PRODUCT: "product_id",
    LegacyKey.PRODUCT_SUITE: "product_suite_id",
    LegacyKey.TOPIC_TAGS: "topic_tag_ids",
}


class LegacyValueCount(BaseModel):
    """How many entities of each kind carry a legacy value."""

    courses: int = 0
    resources: int = 0


class LegacyScan(BaseModel):
    """Distinct legacy values per family."""

    product: dict[str, LegacyValueCount] = Field(default_factory=dict)
    product_suite: dict[str, LegacyValueCount] = Field(default_factory=dict)
    topic_tags: dict[str, LegacyValueCount] = Field(default_factory=dict)
    complete: bool = True


class MigrationMapping(BaseModel):
    """Legacy value -> option ID, per family."""

    product: dict[str, OptionId] | None = None
    product_suite: dict[str, OptionId] | None = None
    topic_tags: dict[str, OptionId] | None = None

    def for_key(self, key: LegacyKey) -> dict[str, OptionId]:
        return getattr(self, key.value) or {}


class MigrationResult(BaseModel):
    """Entities written (or, in a dry run, that would be written)."""

    courses_updated: int = 0
    resources_updated: int = 0
    dry_run: bool = False
    complete: bool = True


def migration_changes(
    entity: CatalogEntity, mapping: MigrationMapping
) -> dict[str, Any]:
    """Canonical fields to fill on one entity.

    First write wins: a family is skipped when its canonical field already
    holds a value, and only the fields being filled are returned.

    Args:
        entity: Course or Content item
        mapping: Legacy value -> option ID mapping

    Returns:
        Field -> value, empty when nothing applies
    """
    changes: dict[str, Any] = {}
    for key, field in CANONICAL_FIELDS.items():
        family = mapping.for_key(key)
        if not family or getattr(entity, field):
            continue

        mapped = [family[value] for value in entity.legacy_values(key) if value in family]
        if not mapped:
            continue

        if key == LegacyKey.TOPIC_TAGS:
            # Several tags can map to the same option
            changes[field] = list(dict.fromkeys(mapped))
        else:
            changes[field] = mapped[0]
    return changes


class MigrationService(Service):
    """Domain service for reconciling legacy free-text values."""

    def __init__(
        self,
        course_repository: CourseRepository,
        content_item_repository: ContentItemRepository,
        option_repository: MetadataOptionRepository,
        settings: MetadataSettings,
    ) -> None:
        """Initialize migration service.

        Args:
            course_repository: Course repository
            content_item_repository: Content item repository
            option_repository: Metadata option repository (mapping checks)
            settings: Metadata settings (batch limits)
        """
        self.course_repository = course_repository
        self.content_item_repository = content_item_repository
        self.option_repository = option_repository
        self.settings = settings

    def _tables(self) -> list[tuple[str, CatalogRepository]]:
        return [
            ("courses", self.course_repository),
            ("resources", self.content_item_repository),
        ]

    async def scan(self, key: LegacyKey | None = None) -> LegacyScan:
        """Bucket legacy values by distinct value with per-kind counts.

        Args:
            key: Only scan this family (all three when None)

        Returns:
            Buckets per family; `complete` is False when the batch budget ran
            out before both tables were read
        """
        with logfire.span(
            "migration_service.scan", key=key.value if key else None
        ):
            keys = [key] if key else list(LegacyKey)
            result = LegacyScan()
            budget = BatchBudget.from_settings("migration scan", self.settings)

            try:
                for kind, repository in self._tables():
                    async for page in scan_pages(
                        repository, budget, self.settings.batch_page_size
                    ):
                        for entity in page:
                            for legacy_key in keys:
                                buckets = getattr(result, legacy_key.value)
                                for value in entity.legacy_values(legacy_key):
                                    count = buckets.setdefault(value, LegacyValueCount())
                                    setattr(count, kind, getattr(count, kind) + 1)
            except BatchBudgetExceededError:
                result.complete = False

            logfire.info(
                "Legacy values scanned",
                products=len(result.product),
                product_suites=len(result.product_suite),
                topic_tags=len(result.topic_tags),
                pages=budget.pages,
                complete=result.complete,
            )
            return result

    async def validate_mapping(self, mapping: MigrationMapping) -> None:
        """Check that every mapped option exists, is live, and has the right group.

        Raises:
            ValidationError: Listing every bad entry
        """
        wanted = {
            option_id for key in LegacyKey for option_id in mapping.for_key(key).values()
        }
        found = {
            option.option_id: option
            for option in await self.option_repository.find_by_ids(sorted(wanted))
        }

        invalid: list[dict[str, str]] = []
        for key in LegacyKey:
            for value, option_id in mapping.for_key(key).items():
                option = found.get(option_id)
                if option is None or option.is_deleted:
                    reason = "option not found"
                elif option.group_key != key.group_key:
                    reason = f"option belongs to {option.group_key.value}"
                else:
                    continue
                invalid.append(
                    {"key": key.value, "value": value, "option_id": option_id, "reason": reason}
                )

        if invalid:
            logfire.warn("Migration mapping rejected", invalid_entries=len(invalid))
            raise ValidationError(
                "Mapping references unknown or mismatched options",
                details={"invalid_entries": invalid},
            )

    async def apply(
        self, mapping: MigrationMapping, dry_run: bool = False
    ) -> MigrationResult:
        """Fill empty canonical fields from mapped legacy values.

        Args:
            mapping: Legacy value -> option ID, per family
            dry_run: Count the entities that would change without writing

        Returns:
            Counts per kind; `complete` is False when the batch budget ran out

        Raises:
            ValidationError: If the mapping references unusable options
        """
        with logfire.span("migration_service.apply", dry_run=dry_run):
            await self.validate_mapping(mapping)

            result = MigrationResult(dry_run=dry_run)
            budget = BatchBudget.from_settings("migration apply", self.settings)
            counters = {"courses": "courses_updated", "resources": "resources_updated"}

            try:
                for kind, repository in self._tables():
                    async for page in scan_pages(
                        repository, budget, self.settings.batch_page_size
                    ):
                        for entity in page:
                            changes = migration_changes(entity, mapping)
                            if not changes:
                                continue
                            if not dry_run:
                                await repository.update_fields(entity.entity_id, changes)
                            counter = counters[kind]
                            setattr(result, counter, getattr(result, counter) + 1)
            except BatchBudgetExceededError:
                result.complete = False

            logfire.info(
                "Legacy migration applied",
                dry_run=dry_run,
                courses_updated=result.courses_updated,
                resources_updated=result.resources_updated,
                complete=result.complete,
            )
            return result
