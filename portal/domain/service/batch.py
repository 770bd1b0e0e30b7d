"""Bounded table traversal shared by usage, merge and legacy migration."""

import time
from collections.abc import AsyncIterator, Callable
from typing import TypeVar

import logfire

from portal.config import MetadataSettings
from portal.domain.error import BatchBudgetExceededError
from portal.domain.model.catalog import CatalogEntity
from portal.domain.repository import CatalogRepository
from portal.domain.value import MetadataGroupKey

E = TypeVar("E", bound=CatalogEntity)


class BatchBudget:
    """Page and wall-clock ceiling for one batch operation.

    A single budget is shared by every table the operation walks, so the
    limits apply to the operation as a whole.
    """

    def __init__(
        self,
        operation: str,
        max_pages: int,
        max_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.operation = operation
        self.max_pages = max_pages
        self.max_seconds = max_seconds
        self._clock = clock
        self._started = clock()
        self.pages = 0

    @classmethod
    def from_settings(cls, operation: str, settings: MetadataSettings) -> "BatchBudget":
        return cls(
            operation,
            max_pages=settings.batch_max_pages,
            max_seconds=settings.batch_max_seconds,
        )

    @property
    def elapsed_seconds(self) -> float:
        return self._clock() - self._started

    @property
    def exhausted(self) -> bool:
        return (
            self.pages >= self.max_pages or self.elapsed_seconds >= self.max_seconds
        )

    def record_page(self) -> None:
        self.pages += 1

    def exceeded(self) -> BatchBudgetExceededError:
        return BatchBudgetExceededError(
            self.operation, self.pages, self.elapsed_seconds
        )


async def scan_pages(
    repository: CatalogRepository[E],
    budget: BatchBudget,
    page_size: int,
    reference: tuple[MetadataGroupKey, str] | None = None,
) -> AsyncIterator[list[E]]:
    """Yield pages of a table until it is exhausted.

    Args:
        repository: Table to walk
        budget: Budget charged one page per fetch
        page_size: Entities per page
        reference: Optional (group, option_id) filter on the canonical field

    Yields:
        Lists of entities in primary-key order

    Raises:
        BatchBudgetExceededError: If more pages remain once the budget is spent
    """
    after: str | None = None
    while True:
        if budget.exhausted:
            logfire.warn(
                "Batch budget exhausted",
                operation=budget.operation,
                pages=budget.pages,
                elapsed_seconds=budget.elapsed_seconds,
            )
            raise budget.exceeded()

        page = await repository.scan(after=after, limit=page_size, reference=reference)
        budget.record_page()
        if page.items:
            yield page.items

        if page.last_key is None:
            return
        after = page.last_key
