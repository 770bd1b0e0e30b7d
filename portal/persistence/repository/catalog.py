"""PostgreSQL implementations of Course and ContentItem repositories."""

from datetime import UTC, datetime
from typing import Any, Callable, Generic, Optional, TypeVar

from sqlalchemy import Column, Table, insert, select, update
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.ext.asyncio import AsyncSession

from portal.domain.model import ContentItem, Course
from portal.domain.model.catalog import CatalogEntity
from portal.domain.repository import (
    CatalogRepository,
    ContentItemRepository,
    CourseRepository,
    ScanPage,
)
from portal.domain.value import MetadataGroupKey
from portal.persistence.mappers import (
    content_item_to_dict,
    course_to_dict,
    row_to_content_item,
    row_to_course,
)
from portal.persistence.tables import content_items_table, courses_table

E = TypeVar("E", bound=CatalogEntity)


class PostgresCatalogRepository(CatalogRepository[E], Generic[E]):
    """Keyset-paginated table access shared by courses and content items."""

    table: Table
    entity_type: type[CatalogEntity]
    row_to_entity: Callable[[dict[str, Any]], E]
    entity_to_dict: Callable[[E], dict[str, Any]]

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async database session
        """
        self.session = session

    @property
    def primary_key(self) -> Column:
        return list(self.table.primary_key.columns)[0]

    def _entity(self, row: Any) -> E:
        return self.row_to_entity(row._asdict())

    async def scan(
        self,
        after: str | None = None,
        limit: int = 100,
        reference: tuple[MetadataGroupKey, str] | None = None,
    ) -> ScanPage[E]:
        """Read one page in primary-key order."""
        pk = self.primary_key
        stmt = select(self.table)

        if after is not None:
            stmt = stmt.where(pk > after)

        if reference is not None:
            group_key, option_id = reference
            field = self.entity_type.reference_field(group_key)
            if field is None:
                return ScanPage(items=[])
            column = self.table.c[field]
            if isinstance(column.type, ARRAY):
                stmt = stmt.where(column.contains([option_id]))
            else:
                stmt = stmt.where(column == option_id)

        stmt = stmt.order_by(pk).limit(limit + 1)
        result = await self.session.execute(stmt)
        entities = [self._entity(row) for row in result.fetchall()]

        if len(entities) > limit:
            entities = entities[:limit]
            return ScanPage(items=entities, last_key=entities[-1].entity_id)
        return ScanPage(items=entities)

    async def find_by_id(self, entity_id: str) -> Optional[E]:
        """Find entity by ID."""
        stmt = select(self.table).where(self.primary_key == entity_id)
        result = await self.session.execute(stmt)
        row = result.fetchone()
        return self._entity(row) if row else None

    async def save(self, entity: E) -> E:
        """Save or update an entity."""
        entity_dict = self.entity_to_dict(entity)

        existing = await self.find_by_id(entity.entity_id)
        if existing:
            stmt = (
                update(self.table)
                .where(self.primary_key == entity.entity_id)
                .values(**entity_dict)
            )
        else:
            stmt = insert(self.table).values(**entity_dict)

        await self.session.execute(stmt)
        await self.session.flush()
        return entity

    async def update_fields(self, entity_id: str, changes: dict[str, Any]) -> None:
        """Set canonical reference fields only."""
        allowed = set(self.entity_type.REFERENCE_FIELDS.values())
        unknown = set(changes) - allowed
        if unknown:
            raise ValueError(f"Not reference fields: {sorted(unknown)}")

        stmt = (
            update(self.table)
            .where(self.primary_key == entity_id)
            .values(**changes, updated_at=datetime.now(UTC))
        )
        await self.session.execute(stmt)
        await self.session.flush()


class PostgresCourseRepository(PostgresCatalogRepository[Course], CourseRepository):
    """PostgreSQL implementation of CourseRepository."""

    table = courses_table
    entity_type = Course
    row_to_entity = staticmethod(row_to_course)
    entity_to_dict = staticmethod(course_to_dict)


class PostgresContentItemRepository(
    PostgresCatalogRepository[ContentItem], ContentItemRepository
):
    """PostgreSQL implementation of ContentItemRepository."""

    table = content_items_table
    entity_type = ContentItem
    row_to_entity = staticmethod(row_to_content_item)
    entity_to_dict = staticmethod(content_item_to_dict)
