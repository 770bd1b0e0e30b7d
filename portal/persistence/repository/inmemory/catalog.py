"""In-memory implementations of Course and ContentItem repositories for testing."""

from copy import deepcopy
from datetime import UTC, datetime
from typing import Any, Generic, Optional, TypeVar

from portal.domain.model import ContentItem, Course
from portal.domain.model.catalog import CatalogEntity
from portal.domain.repository import (
    CatalogRepository,
    ContentItemRepository,
    CourseRepository,
    ScanPage,
)
from portal.domain.value import MetadataGroupKey

from .store import InMemoryStore

E = TypeVar("E", bound=CatalogEntity)


class InMemoryCatalogRepository(CatalogRepository[E], Generic[E]):
    """Dict-backed table scanned in primary-key order."""

    entity_type: type[CatalogEntity]

    def __init__(self, rows: dict[str, E]) -> None:
        self._rows = rows

    async def scan(
        self,
        after: str | None = None,
        limit: int = 100,
        reference: tuple[MetadataGroupKey, str] | None = None,
    ) -> ScanPage[E]:
        """Read one page in primary-key order."""
        keys = sorted(k for k in self._rows if after is None or k > after)
        entities = [self._rows[k] for k in keys]
        if reference is not None:
            entities = [e for e in entities if e.references(*reference)]

        if len(entities) > limit:
            page = entities[:limit]
            return ScanPage(
                items=[deepcopy(e) for e in page], last_key=page[-1].entity_id
            )
        return ScanPage(items=[deepcopy(e) for e in entities])

    async def find_by_id(self, entity_id: str) -> Optional[E]:
        """Find entity by ID."""
        entity = self._rows.get(entity_id)
        return deepcopy(entity) if entity else None

    async def save(self, entity: E) -> E:
        """Save or update an entity."""
        self._rows[entity.entity_id] = deepcopy(entity)
        return deepcopy(entity)

    async def update_fields(self, entity_id: str, changes: dict[str, Any]) -> None:
        """Set canonical reference fields only."""
        allowed = set(self.entity_type.REFERENCE_FIELDS.values())
        unknown = set(changes) - allowed
        if unknown:
            raise ValueError(f"Not reference fields: {sorted(unknown)}")

        entity = self._rows.get(entity_id)
        if entity is None:
            return
        self._rows[entity_id] = entity.model_copy(
            update={**deepcopy(changes), "updated_at": datetime.now(UTC)}
        )


class InMemoryCourseRepository(InMemoryCatalogRepository[Course], CourseRepository):
    """In-memory implementation of CourseRepository for testing."""

    entity_type = Course

    def __init__(self, store: InMemoryStore | None = None) -> None:
        """Initialize repository.

        Args:
            store: Shared store (a private one is created when omitted)
        """
        self.store = store or InMemoryStore()
        super().__init__(self.store.courses)


class InMemoryContentItemRepository(
    InMemoryCatalogRepository[ContentItem], ContentItemRepository
):
    """In-memory implementation of ContentItemRepository for testing."""

    entity_type = ContentItem

    def __init__(self, store: InMemoryStore | None = None) -> None:
        """Initialize repository.

        Args:
            store: Shared store (a private one is created when omitted)
        """
        self.store = store or InMemoryStore()
        super().__init__(self.store.content_items)
