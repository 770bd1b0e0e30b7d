"""Update metadata option use case."""

from datetime import datetime

from pydantic import BaseModel, Field

from portal.domain.service import MetadataService
from portal.domain.value import OptionId, OptionStatus

from .common import MetadataOptionResponse

# Request fields that identify the call rather than describe the change
_CONTEXT_FIELDS = {"option_id", "user_id"}


class UpdateOptionRequest(BaseModel):
    """Update option request.

    Only fields that were explicitly provided are applied; a provided None
    clears the field. Construct with the caller's fields only (e.g. from
    `model_dump(exclude_unset=True)`) so `model_fields_set` stays accurate.
    """

    option_id: str
    user_id: str  # Updating admin
    label: str | None = None
    slug: str | None = None
    sort_order: int | None = Field(default=None, ge=0)
    parent_id: str | None = None
    color: str | None = None
    short_description: str | None = Field(default=None, max_length=140)
    status: OptionStatus | None = None
    archived_at: datetime | None = None  # Timestamp archives, None unarchives
    deleted_at: datetime | None = None  # Timestamp soft-deletes, None restores

    def changes(self) -> dict:
        """Provided fields only, with explicit None kept."""
        provided = self.model_fields_set - _CONTEXT_FIELDS
        return {name: getattr(self, name) for name in provided}


class UpdateOptionResponse(BaseModel):
    """Update option response."""

    option: MetadataOptionResponse


class UpdateOptionUseCase:
    """Use case for partially updating an option."""

    def __init__(self, metadata_service: MetadataService) -> None:
        """Initialize update option use case.

        Args:
            metadata_service: Metadata domain service
        """
        self.metadata_service = metadata_service

    async def execute(self, request: UpdateOptionRequest) -> UpdateOptionResponse:
        """Execute update option flow.

        Args:
            request: Option ID, user and the provided fields

        Returns:
            Updated option

        Raises:
            NotFoundError: If the option does not exist
            ValidationError: If a field is invalid
            ConflictError: If a new slug is already used in the group
        """
        option = await self.metadata_service.update_option(
            option_id=OptionId(request.option_id),
            changes=request.changes(),
            updated_by=request.user_id,
        )
        return UpdateOptionResponse(option=MetadataOptionResponse.from_option(option))
