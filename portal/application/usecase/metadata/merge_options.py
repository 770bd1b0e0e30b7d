"""Merge metadata options use case."""

from pydantic import BaseModel

from portal.domain.service import MetadataService
from portal.domain.value import MetadataGroupKey, OptionId


class MergeOptionsRequest(BaseModel):
    """Merge options request."""

    group_key: MetadataGroupKey
    source_option_id: str
    target_option_id: str
    user_id: str  # Merging admin
    delete_source: bool = False  # Soft-delete instead of archive


class MergeOptionsResponse(BaseModel):
    """Merge options response."""

    message: str
    migrated_courses: int
    migrated_resources: int


class MergeOptionsUseCase:
    """Use case for folding one option into another."""

    def __init__(self, metadata_service: MetadataService) -> None:
        """Initialize merge options use case.

        Args:
            metadata_service: Metadata domain service
        """
        self.metadata_service = metadata_service

    async def execute(self, request: MergeOptionsRequest) -> MergeOptionsResponse:
        """Execute merge flow.

        Steps:
        1. Validate both options (existence, group, target not deleted)
        2. Re-point every Course and Content reference to the target
        3. Archive the source, or soft-delete it when requested

        Not atomic; safe to re-run after a failure.

        Args:
            request: Source, target, user and delete flag

        Returns:
            Number of Courses and Content items rewritten

        Raises:
            NotFoundError: If either option does not exist
            InvalidMergeError: If the options cannot be merged
            BatchBudgetExceededError: If the tables could not be walked in budget
        """
        result = await self.metadata_service.merge_options(
            group_key=request.group_key,
            source_id=OptionId(request.source_option_id),
            target_id=OptionId(request.target_option_id),
            merged_by=request.user_id,
            delete_source=request.delete_source,
        )
        action = "deleted" if request.delete_source else "archived"
        return MergeOptionsResponse(
            message=(
                f"Merged '{result.source.label}' into '{result.target.label}'; "
                f"source {action}"
            ),
            migrated_courses=result.migrated_courses,
            migrated_resources=result.migrated_resources,
        )
