"""Scan legacy metadata values use case."""

from pydantic import BaseModel

from portal.domain.service import LegacyValueCount, MigrationService
from portal.domain.value import LegacyKey


class ScanLegacyValuesRequest(BaseModel):
    """Scan legacy values request."""

    key: LegacyKey | None = None  # Only this family when set


class ScanLegacyValuesResponse(BaseModel):
    """Distinct legacy values with per-kind counts.

    `complete` is False when the scan stopped at its batch budget; re-run to
    continue building the mapping from a fuller picture.
    """

    product: dict[str, LegacyValueCount]
    product_suite: dict[str, LegacyValueCount]
    topic_tags: dict[str, LegacyValueCount]
    complete: bool


class ScanLegacyValuesUseCase:
    """Use case for listing legacy free-text values awaiting a mapping."""

    def __init__(self, migration_service: MigrationService) -> None:
        """Initialize scan use case.

        Args:
            migration_service: Migration domain service
        """
        self.migration_service = migration_service

    async def execute(self, request: ScanLegacyValuesRequest) -> ScanLegacyValuesResponse:
        scan = await self.migration_service.scan(request.key)
        return ScanLegacyValuesResponse(
            product=scan.product,
            product_suite=scan.product_suite,
            topic_tags=scan.topic_tags,
            complete=scan.complete,
        )
