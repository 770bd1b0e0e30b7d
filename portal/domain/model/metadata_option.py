"""Metadata option entity: one entry of a controlled vocabulary."""

from datetime import datetime

from pydantic import Field

from portal.domain.model.common import DomainModel
from portal.domain.value import MetadataGroupKey, OptionId, OptionStatus, Slug


class MetadataOption(DomainModel):
    """A single controlled-vocabulary entry (e.g. "CRM" in product).

    Archived and deleted options keep their row; `deleted_at` excludes the
    option from default listings and `status` hides it from pickers while
    it stays visible on content that already references it.
    """

    option_id: OptionId
    group_key: MetadataGroupKey
    label: str = Field(min_length=1)
    slug: Slug
    sort_order: int = Field(default=0, ge=0)
    parent_id: OptionId | None = None
    color: str | None = None
    short_description: str | None = Field(default=None, max_length=140)
    status: OptionStatus = OptionStatus.ACTIVE
    archived_at: datetime | None = None
    deleted_at: datetime | None = None
    created_at: datetime
    created_by: str
    updated_at: datetime
    updated_by: str

    @property
    def is_archived(self) -> bool:
        return self.status == OptionStatus.ARCHIVED

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


class OptionUsage(DomainModel):
    """How many Courses and Content items reference an option."""

    used_by_courses: int = 0
    used_by_resources: int = 0
    sample_course_ids: list[str] = Field(default_factory=list)
    sample_resource_ids: list[str] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return self.used_by_courses + self.used_by_resources
