"""Course and Content item repository interfaces."""

from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel

from portal.domain.model.catalog import CatalogEntity, ContentItem, Course
from portal.domain.value import MetadataGroupKey

E = TypeVar("E", bound=CatalogEntity)


class ScanPage(BaseModel, Generic[E]):
    """One page of a table scan.

    `last_key` is the continuation key to pass as `after` for the next page;
    None means the table is exhausted.
    """

    items: list[E]
    last_key: str | None = None


class CatalogRepository(ABC, Generic[E]):
    """Table-scan access to entities that reference metadata options.

    There is no reverse index from option to entity; usage, merge and legacy
    migration all walk the table page by page.
    """

    @abstractmethod
    async def scan(
        self,
        after: str | None = None,
        limit: int = 100,
        reference: tuple[MetadataGroupKey, str] | None = None,
    ) -> ScanPage[E]:
        """Read one page of the table in primary-key order.

        Args:
            after: Continuation key from the previous page
            limit: Maximum number of entities to return
            reference: Only return entities whose canonical field for the
                group references the option ID

        Returns:
            Page of entities and the next continuation key
        """
        pass

    @abstractmethod
    async def find_by_id(self, entity_id: str) -> Optional[E]:
        """Find an entity by ID."""
        pass

    @abstractmethod
    async def save(self, entity: E) -> E:
        """Insert or replace an entity."""
        pass

    @abstractmethod
    async def update_fields(self, entity_id: str, changes: dict[str, Any]) -> None:
        """Set the given canonical reference fields, leaving all others untouched.

        Args:
            entity_id: Entity to update
            changes: Field name -> new value
        """
        pass


class CourseRepository(CatalogRepository[Course]):
    """Repository for LMS courses."""


class ContentItemRepository(CatalogRepository[ContentItem]):
    """Repository for content hub resources."""
