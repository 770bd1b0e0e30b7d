"""Delete metadata option use case."""

from pydantic import BaseModel

from portal.domain.service import MetadataService
from portal.domain.value import MetadataGroupKey, OptionId


class DeleteOptionRequest(BaseModel):
    """Delete option request."""

    group_key: MetadataGroupKey
    option_id: str
    user_id: str  # Deleting admin
    force: bool = False  # Delete even while referenced


class DeleteOptionResponse(BaseModel):
    """Delete option response."""

    message: str
    option_id: str


class DeleteOptionUseCase:
    """Use case for safe (soft) deletion of an option."""

    def __init__(self, metadata_service: MetadataService) -> None:
        """Initialize delete option use case.

        Args:
            metadata_service: Metadata domain service
        """
        self.metadata_service = metadata_service

    async def execute(self, request: DeleteOptionRequest) -> DeleteOptionResponse:
        """Execute delete option flow.

        Args:
            request: Group, option, user and force flag

        Returns:
            Confirmation message

        Raises:
            NotFoundError: If the option does not exist in the group
            OptionInUseError: If the option is referenced and force is not set
        """
        option = await self.metadata_service.delete_option(
            group_key=request.group_key,
            option_id=OptionId(request.option_id),
            deleted_by=request.user_id,
            force=request.force,
        )
        return DeleteOptionResponse(
            message="Metadata option deleted successfully",
            option_id=option.option_id,
        )
