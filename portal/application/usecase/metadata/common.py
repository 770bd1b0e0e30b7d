"""Response shapes shared by metadata use cases."""

from datetime import datetime

from pydantic import BaseModel

from portal.domain.model import MetadataOption
from portal.domain.value import MetadataGroupKey, OptionStatus


class MetadataOptionResponse(BaseModel):
    """Metadata option as returned by the API."""

    option_id: str
    group_key: MetadataGroupKey
    label: str
    slug: str
    sort_order: int
    parent_id: str | None
    color: str | None
    short_description: str | None
    status: OptionStatus
    archived_at: datetime | None
    deleted_at: datetime | None
    created_at: datetime
    created_by: str
    updated_at: datetime
    updated_by: str

    @classmethod
    def from_option(cls, option: MetadataOption) -> "MetadataOptionResponse":
        return cls(
            option_id=option.option_id,
            group_key=option.group_key,
            label=option.label,
            slug=str(option.slug),
            sort_order=option.sort_order,
            parent_id=option.parent_id,
            color=option.color,
            short_description=option.short_description,
            status=option.status,
            archived_at=option.archived_at,
            deleted_at=option.deleted_at,
            created_at=option.created_at,
            created_by=option.created_by,
            updated_at=option.updated_at,
            updated_by=option.updated_by,
        )
