"""Get metadata option use case."""

from pydantic import BaseModel

from portal.domain.service import MetadataService
from portal.domain.value import OptionId

from .common import MetadataOptionResponse


class GetOptionRequest(BaseModel):
    """Get option request."""

    option_id: str


class GetOptionResponse(BaseModel):
    """Get option response."""

    option: MetadataOptionResponse


class GetOptionUseCase:
    """Use case for fetching a single option, including deleted ones."""

    def __init__(self, metadata_service: MetadataService) -> None:
        self.metadata_service = metadata_service

    async def execute(self, request: GetOptionRequest) -> GetOptionResponse:
        """Execute get option flow.

        Raises:
            NotFoundError: If the option does not exist
        """
        option = await self.metadata_service.get_option(OptionId(request.option_id))
        return GetOptionResponse(option=MetadataOptionResponse.from_option(option))
