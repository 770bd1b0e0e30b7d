"""In-memory repository implementations for testing."""

from .catalog import InMemoryContentItemRepository, InMemoryCourseRepository
from .metadata_option import InMemoryMetadataOptionRepository
from .store import InMemoryStore

__all__ = [
    "InMemoryContentItemRepository",
    "InMemoryCourseRepository",
    "InMemoryMetadataOptionRepository",
    "InMemoryStore",
]
