"""Create metadata option use case."""

from pydantic import BaseModel, Field

from portal.domain.service import MetadataService
from portal.domain.value import MetadataGroupKey, OptionId

from .common import MetadataOptionResponse


class CreateOptionRequest(BaseModel):
    """Create option request."""

    group_key: MetadataGroupKey
    user_id: str  # Creating admin
    label: str = Field(min_length=1)
    slug: str | None = None  # Derived from label when omitted
    sort_order: int = Field(default=0, ge=0)
    parent_id: str | None = None
    color: str | None = None
    short_description: str | None = Field(default=None, max_length=140)


class CreateOptionResponse(BaseModel):
    """Create option response."""

    option: MetadataOptionResponse


class CreateOptionUseCase:
    """Use case for adding an option to a group."""

    def __init__(self, metadata_service: MetadataService) -> None:
        """Initialize create option use case.

        Args:
            metadata_service: Metadata domain service
        """
        self.metadata_service = metadata_service

    async def execute(self, request: CreateOptionRequest) -> CreateOptionResponse:
        """Execute create option flow.

        Args:
            request: Group, user and option fields

        Returns:
            Created option

        Raises:
            ValidationError: If a field or the parent is invalid
            ConflictError: If the slug is already used in the group
        """
        option = await self.metadata_service.create_option(
            group_key=request.group_key,
            label=request.label,
            created_by=request.user_id,
            slug=request.slug,
            sort_order=request.sort_order,
            parent_id=OptionId(request.parent_id) if request.parent_id else None,
            color=request.color,
            short_description=request.short_description,
        )
        return CreateOptionResponse(option=MetadataOptionResponse.from_option(option))
