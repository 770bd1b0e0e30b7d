"""Domain model entities for the portal."""

from portal.domain.model.catalog import CatalogEntity, ContentItem, Course
from portal.domain.model.metadata_option import MetadataOption, OptionUsage
from portal.domain.model.user import AuthenticatedUser

__all__ = [
    "AuthenticatedUser",
    "CatalogEntity",
    "ContentItem",
    "Course",
    "MetadataOption",
    "OptionUsage",
]
