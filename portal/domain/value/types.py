"""Domain value objects for the portal.

Value objects are immutable and defined by their values, not identity.
They encapsulate validation rules and business logic.
"""

import re
from enum import Enum

from pydantic import field_validator

from portal.domain.value.common import RootValueObject


class MetadataGroupKey(str, Enum):
    """Taxonomy category a metadata option belongs to."""

    PRODUCT = "product"
    PRODUCT_SUITE = "product_suite"
    TOPIC_TAG = "topic_tag"
    BADGE = "badge"
    AUDIENCE = "audience"


class OptionStatus(str, Enum):
    """Lifecycle status of a metadata option."""

    ACTIVE = "active"
    ARCHIVED = "archived"


class LegacyKey(str, Enum):
    """Legacy free-text field families reconciled by the migration tool."""

    PRODUCT = "product"
    PRODUCT_SUITE = "product_suite"
    TOPIC_TAGS = "topic_tags"

    @property
    def group_key(self) -> MetadataGroupKey:
        """Group whose options legacy values of this family map to."""
        return _LEGACY_GROUPS[self]


_LEGACY_GROUPS = {
    LegacyKey.PRODUCT: MetadataGroupKey.PRODUCT,
    LegacyKey.PRODUCT_SUITE: MetadataGroupKey.PRODUCT_SUITE,
    LegacyKey.TOPIC_TAGS: MetadataGroupKey.TOPIC_TAG,
}


class UserRole(str, Enum):
    """Role tier, totally ordered for authorization checks."""

    VIEWER = "Viewer"
    CONTRIBUTOR = "Contributor"
    APPROVER = "Approver"
    ADMIN = "Admin"

    @property
    def level(self) -> int:
        """Ordinal position of the tier (Viewer=0 ... Admin=3)."""
        return ROLE_LEVELS[self]

    def satisfies(self, minimum: "UserRole") -> bool:
        """Whether this tier is at least `minimum`."""
        return self.level >= minimum.level


ROLE_LEVELS: dict[UserRole, int] = {
    UserRole.VIEWER: 0,
    UserRole.CONTRIBUTOR: 1,
    UserRole.APPROVER: 2,
    UserRole.ADMIN: 3,
}


class Slug(RootValueObject[str]):
    """URL-safe key of a metadata option, unique within its group.

    Must be lowercase alphanumeric with single hyphens, 1-100 characters.
    Examples: 'onboarding', 'sales-enablement', 'crm-2'
    """

    @field_validator("root")
    @classmethod
    def validate_slug_format(cls, v: str) -> str:
        """Validate slug format."""
        if len(v) < 1 or len(v) > 100:
            raise ValueError("Slug must be 1-100 characters")
        if not re.match(r"^[a-z0-9]+(?:-[a-z0-9]+)*$", v):
            raise ValueError(
                "Slug must be lowercase alphanumeric with hyphens, "
                "no leading/trailing hyphens or consecutive hyphens"
            )
        return v

    @classmethod
    def from_label(cls, label: str) -> "Slug":
        """Derive a slug from a display label.

        Punctuation is dropped, whitespace and underscore runs become a
        single hyphen: "Don't Panic" -> "dont-panic", "Q&A" -> "qa".

        Raises:
            ValueError: If the label has no alphanumeric characters
        """
        slug = re.sub(r"[^\w\s-]", "", label.strip().lower(), flags=re.ASCII)
        slug = re.sub(r"[\s_-]+", "-", slug)
        slug = slug.strip("-")[:100].rstrip("-")
        if not slug:
            raise ValueError(f"Cannot derive a slug from label {label!r}")
        return cls(slug)
