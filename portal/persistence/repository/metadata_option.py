"""PostgreSQL implementation of MetadataOption repository."""

from typing import Optional

from sqlalchemy import insert, or_, select, tuple_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from portal.domain.error import ConflictError
from portal.domain.model import MetadataOption
from portal.domain.repository import MetadataOptionRepository, OptionFilter, OptionPage
from portal.domain.value import MetadataGroupKey, OptionId, OptionStatus, Slug
from portal.persistence.mappers import metadata_option_to_dict, row_to_metadata_option
from portal.persistence.tables import metadata_options_table


class PostgresMetadataOptionRepository(MetadataOptionRepository):
    """PostgreSQL implementation of MetadataOptionRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async database session
        """
        self.session = session

    async def save(self, option: MetadataOption) -> MetadataOption:
        """Save or update an option."""
        option_dict = metadata_option_to_dict(option)

        existing = await self.find_by_id(option.option_id)

        if existing:
            stmt = (
                update(metadata_options_table)
                .where(metadata_options_table.c.option_id == option.option_id)
                .values(**option_dict)
            )
        else:
            stmt = insert(metadata_options_table).values(**option_dict)

        try:
            # Savepoint keeps the session usable after a constraint violation
            async with self.session.begin_nested():
                await self.session.execute(stmt)
        except IntegrityError as e:
            # uq_metadata_options_group_slug: lost a race with a concurrent write
            raise ConflictError(
                f"An option with slug '{option.slug}' already exists in "
                f"{option.group_key.value}"
            ) from e

        return option

    async def find_by_id(self, option_id: OptionId) -> Optional[MetadataOption]:
        """Find option by ID."""
        stmt = select(metadata_options_table).where(
            metadata_options_table.c.option_id == option_id
        )
        result = await self.session.execute(stmt)
        row = result.fetchone()
        return row_to_metadata_option(row._asdict()) if row else None

    async def find_by_ids(self, option_ids: list[OptionId]) -> list[MetadataOption]:
        """Find multiple options in a single query."""
        if not option_ids:
            return []

        stmt = select(metadata_options_table).where(
            metadata_options_table.c.option_id.in_(option_ids)
        )
        result = await self.session.execute(stmt)
        return [row_to_metadata_option(row._asdict()) for row in result.fetchall()]

    async def find_by_slug(
        self, group_key: MetadataGroupKey, slug: Slug
    ) -> Optional[MetadataOption]:
        """Find option by slug within a group."""
        stmt = select(metadata_options_table).where(
            metadata_options_table.c.group_key == group_key.value,
            metadata_options_table.c.slug == slug.root,
        )
        result = await self.session.execute(stmt)
        row = result.fetchone()
        return row_to_metadata_option(row._asdict()) if row else None

    async def find_page(self, option_filter: OptionFilter) -> OptionPage:
        """List options in (sort_order, label, option_id) order."""
        t = metadata_options_table
        stmt = select(t).where(t.c.group_key == option_filter.group_key.value)

        if not option_filter.include_deleted:
            stmt = stmt.where(t.c.deleted_at.is_(None))
        if not option_filter.include_archived:
            stmt = stmt.where(t.c.status == OptionStatus.ACTIVE.value)
        if option_filter.query:
            stmt = stmt.where(
                or_(
                    t.c.label.icontains(option_filter.query, autoescape=True),
                    t.c.slug.icontains(option_filter.query, autoescape=True),
                )
            )
        if option_filter.parent_id:
            # Unparented options stay visible under every parent
            stmt = stmt.where(
                or_(t.c.parent_id == option_filter.parent_id, t.c.parent_id.is_(None))
            )
        if option_filter.after:
            after = option_filter.after
            stmt = stmt.where(
                tuple_(t.c.sort_order, t.c.label, t.c.option_id)
                > tuple_(after.sort_order, after.label, after.option_id)
            )

        # Fetch one extra row to know whether another page exists
        stmt = stmt.order_by(t.c.sort_order, t.c.label, t.c.option_id).limit(
            option_filter.limit + 1
        )
        result = await self.session.execute(stmt)
        rows = result.fetchall()

        items = [row_to_metadata_option(row._asdict()) for row in rows]
        return OptionPage(
            items=items[: option_filter.limit],
            has_more=len(items) > option_filter.limit,
        )
