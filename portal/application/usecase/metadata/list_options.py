"""List metadata options use case."""

from pydantic import BaseModel

from portal.domain.service import MetadataService
from portal.domain.value import MetadataGroupKey, OptionId

from .common import MetadataOptionResponse


class ListOptionsRequest(BaseModel):
    """List options request."""

    group_key: MetadataGroupKey
    query: str | None = None
    include_archived: bool = False
    include_deleted: bool = False
    parent_id: str | None = None
    limit: int | None = None  # Clamped by the service
    cursor: str | None = None  # Opaque token from a previous response


class ListOptionsResponse(BaseModel):
    """List options response."""

    options: list[MetadataOptionResponse]
    next_cursor: str | None = None


class ListOptionsUseCase:
    """Use case for listing a group's options."""

    def __init__(self, metadata_service: MetadataService) -> None:
        """Initialize list options use case.

        Args:
            metadata_service: Metadata domain service
        """
        self.metadata_service = metadata_service

    async def execute(self, request: ListOptionsRequest) -> ListOptionsResponse:
        """Execute list options flow.

        Args:
            request: Group, filters and pagination

        Returns:
            Page of options and the next cursor, if any

        Raises:
            ValidationError: If the cursor is malformed
        """
        page = await self.metadata_service.list_options(
            group_key=request.group_key,
            query=request.query,
            include_archived=request.include_archived,
            include_deleted=request.include_deleted,
            parent_id=OptionId(request.parent_id) if request.parent_id else None,
            limit=request.limit,
            cursor=request.cursor,
        )
        return ListOptionsResponse(
            options=[MetadataOptionResponse.from_option(o) for o in page.options],
            next_cursor=page.next_cursor,
        )
