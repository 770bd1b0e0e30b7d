"""Apply legacy metadata migration use case."""

from pydantic import BaseModel

from portal.domain.service import MigrationMapping, MigrationService


class ApplyMigrationRequest(BaseModel):
    """Apply migration request.

    Each mapping is `{"Legacy Value": "option_id"}`.
    """

    product: dict[str, str] | None = None
    product_suite: dict[str, str] | None = None
    topic_tags: dict[str, str] | None = None
    dry_run: bool = False


class ApplyMigrationResponse(BaseModel):
    """Apply migration response."""

    courses_updated: int
    resources_updated: int
    dry_run: bool
    complete: bool


class ApplyMigrationUseCase:
    """Use case for writing mapped option IDs into empty canonical fields."""

    def __init__(self, migration_service: MigrationService) -> None:
        """Initialize apply migration use case.

        Args:
            migration_service: Migration domain service
        """
        self.migration_service = migration_service

    async def execute(self, request: ApplyMigrationRequest) -> ApplyMigrationResponse:
        """Execute apply migration flow.

        Canonical fields that already hold a value are never overwritten, so
        re-running with the same mapping is a no-op for migrated entities.

        Args:
            request: Mappings per family and dry-run flag

        Returns:
            Entities updated (or that would be, in a dry run)

        Raises:
            ValidationError: If the mapping references unusable options
        """
        mapping = MigrationMapping(
            product=request.product,
            product_suite=request.product_suite,
            topic_tags=request.topic_tags,
        )
        result = await self.migration_service.apply(mapping, dry_run=request.dry_run)
        return ApplyMigrationResponse(
            courses_updated=result.courses_updated,
            resources_updated=result.resources_updated,
            dry_run=result.dry_run,
            complete=result.complete,
        )
