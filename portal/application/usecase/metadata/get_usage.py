"""Get metadata option usage use case."""

from pydantic import BaseModel

from portal.domain.service import MetadataService
from portal.domain.value import MetadataGroupKey, OptionId


class GetUsageRequest(BaseModel):
    """Get usage request."""

    group_key: MetadataGroupKey
    option_id: str


class GetUsageResponse(BaseModel):
    """Get usage response."""

    used_by_courses: int
    used_by_resources: int
    sample_course_ids: list[str]
    sample_resource_ids: list[str]


class GetUsageUseCase:
    """Use case for counting Course/Content references to an option."""

    def __init__(self, metadata_service: MetadataService) -> None:
        self.metadata_service = metadata_service

    async def execute(self, request: GetUsageRequest) -> GetUsageResponse:
        """Execute get usage flow.

        Raises:
            NotFoundError: If the option does not exist in the group
            BatchBudgetExceededError: If the tables could not be walked in budget
        """
        usage = await self.metadata_service.get_usage(
            request.group_key, OptionId(request.option_id)
        )
        return GetUsageResponse(
            used_by_courses=usage.used_by_courses,
            used_by_resources=usage.used_by_resources,
            sample_course_ids=usage.sample_course_ids,
            sample_resource_ids=usage.sample_resource_ids,
        )
