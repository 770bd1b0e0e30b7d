"""In-memory implementation of MetadataOption repository for testing."""

from copy import deepcopy
from typing import Optional

from portal.domain.error import ConflictError
from portal.domain.model import MetadataOption
from portal.domain.repository import MetadataOptionRepository, OptionFilter, OptionPage
from portal.domain.value import MetadataGroupKey, OptionId, Slug

from .store import InMemoryStore


def _sort_key(option: MetadataOption) -> tuple[int, str, str]:
    return (option.sort_order, option.label, option.option_id)


class InMemoryMetadataOptionRepository(MetadataOptionRepository):
    """In-memory implementation of MetadataOptionRepository for testing."""

    def __init__(self, store: InMemoryStore | None = None) -> None:
        """Initialize repository.

        Args:
            store: Shared store (a private one is created when omitted)
        """
        self.store = store or InMemoryStore()

    async def save(self, option: MetadataOption) -> MetadataOption:
        """Save or update an option."""
        for other in self.store.options.values():
            if (
                other.option_id != option.option_id
                and other.group_key == option.group_key
                and other.slug == option.slug
            ):
                raise ConflictError(
                    f"An option with slug '{option.slug}' already exists in "
                    f"{option.group_key.value}"
                )
        self.store.options[option.option_id] = deepcopy(option)
        return deepcopy(option)

    async def find_by_id(self, option_id: OptionId) -> Optional[MetadataOption]:
        """Find option by ID."""
        option = self.store.options.get(option_id)
        return deepcopy(option) if option else None

    async def find_by_ids(self, option_ids: list[OptionId]) -> list[MetadataOption]:
        """Find multiple options by ID."""
        return [
            deepcopy(self.store.options[option_id])
            for option_id in option_ids
            if option_id in self.store.options
        ]

    async def find_by_slug(
        self, group_key: MetadataGroupKey, slug: Slug
    ) -> Optional[MetadataOption]:
        """Find option by slug within a group."""
        for option in self.store.options.values():
            if option.group_key == group_key and option.slug == slug:
                return deepcopy(option)
        return None

    def _matches(self, option: MetadataOption, option_filter: OptionFilter) -> bool:
        if option.group_key != option_filter.group_key:
            return False
        if option.is_deleted and not option_filter.include_deleted:
            return False
        if option.is_archived and not option_filter.include_archived:
            return False
        if option_filter.query:
            needle = option_filter.query.lower()
            if needle not in option.label.lower() and needle not in option.slug.root:
                return False
        if option_filter.parent_id and option.parent_id not in (
            option_filter.parent_id,
            None,
        ):
            return False
        return True

    async def find_page(self, option_filter: OptionFilter) -> OptionPage:
        """List options in (sort_order, label, option_id) order."""
        options = sorted(
            (o for o in self.store.options.values() if self._matches(o, option_filter)),
            key=_sort_key,
        )

        if option_filter.after:
            after = option_filter.after
            position = (after.sort_order, after.label, after.option_id)
            options = [o for o in options if _sort_key(o) > position]

        return OptionPage(
            items=[deepcopy(o) for o in options[: option_filter.limit]],
            has_more=len(options) > option_filter.limit,
        )
