"""Domain value objects for the portal."""

from portal.domain.value.identifiers import (
    ContentId,
    CourseId,
    OptionId,
    UserId,
)
from portal.domain.value.types import (
    ROLE_LEVELS,
    LegacyKey,
    MetadataGroupKey,
    OptionStatus,
    Slug,
    UserRole,
)

__all__ = [
    # Identifiers
    "OptionId",
    "CourseId",
    "ContentId",
    "UserId",
    # Types
    "MetadataGroupKey",
    "OptionStatus",
    "LegacyKey",
    "UserRole",
    "ROLE_LEVELS",
    "Slug",
]
