"""Repository interfaces for the portal domain.

Repository interfaces are defined in the domain layer (dependency inversion).
Implementations live in the persistence layer.
"""

from portal.domain.repository.catalog import (
    CatalogRepository,
    ContentItemRepository,
    CourseRepository,
    ScanPage,
)
from portal.domain.repository.metadata_option import (
    MetadataOptionRepository,
    OptionFilter,
    OptionKey,
    OptionPage,
)

__all__ = [
    "CatalogRepository",
    "ContentItemRepository",
    "CourseRepository",
    "MetadataOptionRepository",
    "OptionFilter",
    "OptionKey",
    "OptionPage",
    "ScanPage",
]
