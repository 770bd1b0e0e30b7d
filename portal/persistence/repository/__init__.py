"""PostgreSQL repository implementations."""

from portal.persistence.repository.catalog import (
    PostgresContentItemRepository,
    PostgresCourseRepository,
)
from portal.persistence.repository.metadata_option import (
    PostgresMetadataOptionRepository,
)

__all__ = [
    "PostgresContentItemRepository",
    "PostgresCourseRepository",
    "PostgresMetadataOptionRepository",
]
