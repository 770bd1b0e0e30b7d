"""Courses and Content items, as seen by the taxonomy.

These entities are owned by the LMS and content hub; the taxonomy only reads
their references and rewrites the canonical reference fields.
"""

from datetime import datetime
from typing import Any, ClassVar

from pydantic import Field

from portal.domain.model.common import DomainModel
from portal.domain.value import ContentId, CourseId, LegacyKey, MetadataGroupKey


class CatalogEntity(DomainModel):
    """Fields shared by Courses and Content items.

    Canonical fields hold option IDs. Legacy fields hold the free-text values
    that predate the taxonomy and are kept until migration is finished.
    """

    # Set by subclasses: primary key field and legacy free-text tag field
    ID_FIELD: ClassVar[str]
    LEGACY_TAGS_FIELD: ClassVar[str]

    # Group -> canonical field holding references to that group's options
    REFERENCE_FIELDS: ClassVar[dict[MetadataGroupKey, str]] = {
        MetadataGroupKey.PRODUCT: "product_id",
        MetadataGroupKey.PRODUCT_SUITE: "product_suite_id",
        MetadataGroupKey.TOPIC_TAG: "topic_tag_ids",
        MetadataGroupKey.AUDIENCE: "audience_ids",
    }

    title: str = ""

    # Canonical references
    product_id: str | None = None
    product_suite_id: str | None = None
    topic_tag_ids: list[str] = Field(default_factory=list)
    audience_ids: list[str] = Field(default_factory=list)

    # Legacy free-text values
    product: str | None = None
    product_suite: str | None = None
    legacy_product_suite: str | None = None
    legacy_product_concept: str | None = None

    updated_at: datetime | None = None

    @property
    def entity_id(self) -> str:
        return getattr(self, self.ID_FIELD)

    @property
    def legacy_topic_tags(self) -> list[str]:
        return getattr(self, self.LEGACY_TAGS_FIELD)

    @classmethod
    def reference_field(cls, group_key: MetadataGroupKey) -> str | None:
        """Canonical field referencing `group_key`, or None if this entity has none."""
        return cls.REFERENCE_FIELDS.get(group_key)

    def references(self, group_key: MetadataGroupKey, option_id: str) -> bool:
        """Whether this entity's canonical field for `group_key` holds `option_id`."""
        field = self.reference_field(group_key)
        if field is None:
            return False
        value = getattr(self, field)
        if isinstance(value, list):
            return option_id in value
        return value == option_id

    def repoint(
        self, group_key: MetadataGroupKey, source_id: str, target_id: str
    ) -> dict[str, Any]:
        """Changes that move this entity's reference from source to target.

        List fields keep their order and drop the duplicate when the entity
        already references the target.

        Returns:
            Field -> new value, empty when the entity does not reference source
        """
        if not self.references(group_key, source_id):
            return {}

        field = self.reference_field(group_key)
        value = getattr(self, field)
        if not isinstance(value, list):
            return {field: target_id}

        repointed: list[str] = []
        for option_id in value:
            replacement = target_id if option_id == source_id else option_id
            if replacement not in repointed:
                repointed.append(replacement)
        return {field: repointed}

    def legacy_values(self, key: LegacyKey) -> list[str]:
        """Legacy free-text values of a field family, empty strings dropped."""
        if key == LegacyKey.PRODUCT:
            value = self.legacy_product_suite or self.product
            return [value] if value else []
        if key == LegacyKey.PRODUCT_SUITE:
            value = self.legacy_product_concept or self.product_suite
            return [value] if value else []
        return [tag for tag in self.legacy_topic_tags if tag]


class Course(CatalogEntity):
    """LMS course."""

    ID_FIELD: ClassVar[str] = "course_id"
    LEGACY_TAGS_FIELD: ClassVar[str] = "topic_tags"
    REFERENCE_FIELDS: ClassVar[dict[MetadataGroupKey, str]] = {
        **CatalogEntity.REFERENCE_FIELDS,
        MetadataGroupKey.BADGE: "badge_ids",
    }

    course_id: CourseId
    badge_ids: list[str] = Field(default_factory=list)
    topic_tags: list[str] = Field(default_factory=list)


class ContentItem(CatalogEntity):
    """Content hub resource. Badges never apply to content items."""

    ID_FIELD: ClassVar[str] = "content_id"
    LEGACY_TAGS_FIELD: ClassVar[str] = "tags"

    content_id: ContentId
    tags: list[str] = Field(default_factory=list)
