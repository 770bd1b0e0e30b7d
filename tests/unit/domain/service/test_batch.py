"""Unit tests for bounded table traversal."""

import pytest

from portal.domain.error import BatchBudgetExceededError
from portal.domain.service import BatchBudget, scan_pages
from portal.persistence.repository.inmemory import InMemoryCourseRepository
from tests.conftest import make_course


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


async def seeded_repository(count: int) -> InMemoryCourseRepository:
    repository = InMemoryCourseRepository()
    for index in range(count):
        await repository.save(make_course(f"c{index:02d}"))
    return repository


class TestScanPages:
    @pytest.mark.asyncio
    async def test_walks_table_in_key_order(self):
        repository = await seeded_repository(5)
        budget = BatchBudget("test", max_pages=10, max_seconds=60)

        pages = [page async for page in scan_pages(repository, budget, page_size=2)]

        assert [[c.course_id for c in page] for page in pages] == [
            ["c00", "c01"],
            ["c02", "c03"],
            ["c04"],
        ]
        assert budget.pages == 3

    @pytest.mark.asyncio
    async def test_page_budget(self):
        repository = await seeded_repository(5)
        budget = BatchBudget("usage", max_pages=2, max_seconds=60)
        seen = []

        with pytest.raises(BatchBudgetExceededError) as exc_info:
            async for page in scan_pages(repository, budget, page_size=2):
                seen.extend(page)

        assert len(seen) == 4
        assert exc_info.value.operation == "usage"
        assert exc_info.value.pages == 2

    @pytest.mark.asyncio
    async def test_time_budget(self):
        repository = await seeded_repository(5)
        clock = FakeClock()
        budget = BatchBudget("merge", max_pages=100, max_seconds=1.0, clock=clock)

        with pytest.raises(BatchBudgetExceededError):
            async for _ in scan_pages(repository, budget, page_size=1):
                clock.now += 0.6

    @pytest.mark.asyncio
    async def test_table_that_fits_the_budget_exactly(self):
        repository = await seeded_repository(4)
        budget = BatchBudget("scan", max_pages=2, max_seconds=60)

        pages = [page async for page in scan_pages(repository, budget, page_size=2)]

        assert sum(len(page) for page in pages) == 4
