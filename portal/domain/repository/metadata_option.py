"""Metadata option repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel, Field

from portal.domain.model.metadata_option import MetadataOption
from portal.domain.value import MetadataGroupKey, OptionId, Slug


class OptionKey(BaseModel):
    """Keyset position in the listing order (sort_order, label, option_id)."""

    sort_order: int
    label: str
    option_id: str


class OptionFilter(BaseModel):
    """Listing filter for one group."""

    group_key: MetadataGroupKey
    query: str | None = None  # Case-insensitive substring of label or slug
    include_archived: bool = False
    include_deleted: bool = False
    parent_id: OptionId | None = None
    limit: int = Field(default=50, ge=1)
    after: OptionKey | None = None


class OptionPage(BaseModel):
    """One page of options plus whether more exist."""

    items: list[MetadataOption]
    has_more: bool = False


class MetadataOptionRepository(ABC):
    """Repository interface for MetadataOption.

    Rows are never removed; delete and archive are field updates done
    through `save`.
    """

    @abstractmethod
    async def save(self, option: MetadataOption) -> MetadataOption:
        """Insert or update an option.

        Args:
            option: Option to save

        Returns:
            Saved option
        """
        pass

    @abstractmethod
    async def find_by_id(self, option_id: OptionId) -> Optional[MetadataOption]:
        """Find option by ID, including archived and deleted ones.

        Args:
            option_id: Option identifier

        Returns:
            Option if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_ids(self, option_ids: list[OptionId]) -> list[MetadataOption]:
        """Find several options in one round trip.

        Args:
            option_ids: Option identifiers

        Returns:
            Found options (may be fewer than requested)
        """
        pass

    @abstractmethod
    async def find_by_slug(
        self, group_key: MetadataGroupKey, slug: Slug
    ) -> Optional[MetadataOption]:
        """Find option by slug within a group, including deleted ones.

        Args:
            group_key: Group to search
            slug: Slug to look up

        Returns:
            Option if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_page(self, option_filter: OptionFilter) -> OptionPage:
        """List options ordered by sort_order, label, option_id.

        With `parent_id` set, returns children of that parent plus options
        that have no parent at all.

        Args:
            option_filter: Group, filters, page size and keyset position

        Returns:
            Page of options
        """
        pass
