"""Metadata taxonomy routes."""

from datetime import datetime

import logfire
from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Request, status
from pydantic import BaseModel, Field

from portal.application.usecase.metadata import (
    CreateOptionRequest,
    CreateOptionResponse,
    CreateOptionUseCase,
    DeleteOptionRequest,
    DeleteOptionResponse,
    DeleteOptionUseCase,
    GetOptionRequest,
    GetOptionResponse,
    GetOptionUseCase,
    GetUsageRequest,
    GetUsageResponse,
    GetUsageUseCase,
    ListOptionsRequest,
    ListOptionsResponse,
    ListOptionsUseCase,
    MergeOptionsRequest,
    MergeOptionsResponse,
    MergeOptionsUseCase,
    UpdateOptionRequest,
    UpdateOptionResponse,
    UpdateOptionUseCase,
)
from portal.domain.value import MetadataGroupKey, OptionStatus
from portal.interface.api.auth import AdminUser, ViewerUser
from portal.interface.api.schemas import Envelope, envelope
from portal.interface.error import ApiError

router = APIRouter(prefix="/v1/metadata", tags=["metadata"], route_class=DishkaRoute)


def parse_group_key(value: str) -> MetadataGroupKey:
    """Resolve a path segment to a group key.

    Raises:
        ApiError: 400 INVALID_GROUP_KEY for unknown groups
    """
    try:
        return MetadataGroupKey(value)
    except ValueError:
        allowed = ", ".join(key.value for key in MetadataGroupKey)
        raise ApiError(
            status.HTTP_400_BAD_REQUEST,
            "INVALID_GROUP_KEY",
            f"Invalid group key. Must be one of: {allowed}",
        ) from None


class CreateOptionBody(BaseModel):
    label: str = Field(min_length=1)
    slug: str | None = None
    sort_order: int = Field(default=0, ge=0)
    parent_id: str | None = None
    color: str | None = None
    short_description: str | None = Field(default=None, max_length=140)


class UpdateOptionBody(BaseModel):
    """Partial update; send null to clear a field."""

    label: str | None = None
    slug: str | None = None
    sort_order: int | None = Field(default=None, ge=0)
    parent_id: str | None = None
    color: str | None = None
    short_description: str | None = Field(default=None, max_length=140)
    status: OptionStatus | None = None
    archived_at: datetime | None = None
    deleted_at: datetime | None = None


class MergeOptionsBody(BaseModel):
    target_option_id: str = Field(min_length=1)
    delete_source: bool = False


@router.get(
    "/options/{option_id}",
    response_model=Envelope[GetOptionResponse],
    summary="Get a metadata option",
)
async def get_option(
    request: Request,
    option_id: str,
    user: ViewerUser,
    use_case: FromDishka[GetOptionUseCase],
) -> Envelope:
    """Get a single option by ID. Deleted options are still returned."""
    with logfire.span("api.get_option", option_id=option_id):
        result = await use_case.execute(GetOptionRequest(option_id=option_id))
        return envelope(request, result)


@router.patch(
    "/options/{option_id}",
    response_model=Envelope[UpdateOptionResponse],
    summary="Update a metadata option",
)
async def update_option(
    request: Request,
    option_id: str,
    body: UpdateOptionBody,
    user: AdminUser,
    use_case: FromDishka[UpdateOptionUseCase],
) -> Envelope:
    """Apply the provided fields to an option.

    Setting `status` to archived stamps `archived_at`; setting it back to
    active clears it.

    Example:
        PATCH /v1/metadata/options/<id>
        {"status": "archived", "color": null}
    """
    with logfire.span("api.update_option", option_id=option_id, user_id=user.user_id):
        result = await use_case.execute(
            UpdateOptionRequest(
                option_id=option_id,
                user_id=user.user_id,
                **body.model_dump(exclude_unset=True),
            )
        )
        return envelope(request, result)


@router.get(
    "/{group_key}/options",
    response_model=Envelope[ListOptionsResponse],
    summary="List a group's options",
)
async def list_options(
    request: Request,
    group_key: str,
    user: ViewerUser,
    use_case: FromDishka[ListOptionsUseCase],
    query: str | None = None,
    include_archived: bool = False,
    include_deleted: bool = False,
    parent_id: str | None = None,
    limit: int | None = None,
    cursor: str | None = None,
) -> Envelope:
    """List options ordered by sort order then label.

    Archived and deleted options are hidden unless asked for. Pass the
    returned `next_cursor` back as `cursor` for the next page.

    Example:
        GET /v1/metadata/topic_tag/options?query=onboard&limit=20
    """
    group = parse_group_key(group_key)
    with logfire.span("api.list_options", group_key=group.value, query=query):
        result = await use_case.execute(
            ListOptionsRequest(
                group_key=group,
                query=query,
                include_archived=include_archived,
                include_deleted=include_deleted,
                parent_id=parent_id,
                limit=limit,
                cursor=cursor,
            )
        )
        return envelope(request, result)


@router.post(
    "/{group_key}/options",
    response_model=Envelope[CreateOptionResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a metadata option",
)
async def create_option(
    request: Request,
    group_key: str,
    body: CreateOptionBody,
    user: AdminUser,
    use_case: FromDishka[CreateOptionUseCase],
) -> Envelope:
    """Create an option. The slug is derived from the label when omitted.

    Example:
        POST /v1/metadata/topic_tag/options
        {"label": "Onboarding"}
    """
    group = parse_group_key(group_key)
    with logfire.span("api.create_option", group_key=group.value, user_id=user.user_id):
        result = await use_case.execute(
            CreateOptionRequest(
                group_key=group,
                user_id=user.user_id,
                **body.model_dump(),
            )
        )
        return envelope(request, result)


@router.get(
    "/{group_key}/options/{option_id}/usage",
    response_model=Envelope[GetUsageResponse],
    summary="Count references to an option",
)
async def get_usage(
    request: Request,
    group_key: str,
    option_id: str,
    user: AdminUser,
    use_case: FromDishka[GetUsageUseCase],
) -> Envelope:
    """Count Courses and Content items that reference an option."""
    group = parse_group_key(group_key)
    with logfire.span("api.get_usage", group_key=group.value, option_id=option_id):
        result = await use_case.execute(
            GetUsageRequest(group_key=group, option_id=option_id)
        )
        return envelope(request, result)


@router.delete(
    "/{group_key}/options/{option_id}",
    response_model=Envelope[DeleteOptionResponse],
    summary="Soft-delete a metadata option",
)
async def delete_option(
    request: Request,
    group_key: str,
    option_id: str,
    user: AdminUser,
    use_case: FromDishka[DeleteOptionUseCase],
    force: bool = False,
) -> Envelope:
    """Soft-delete an option.

    Refused with 409 OPTION_IN_USE while referenced, unless `force=true`.
    """
    group = parse_group_key(group_key)
    with logfire.span(
        "api.delete_option", group_key=group.value, option_id=option_id, force=force
    ):
        result = await use_case.execute(
            DeleteOptionRequest(
                group_key=group,
                option_id=option_id,
                user_id=user.user_id,
                force=force,
            )
        )
        return envelope(request, result)


@router.post(
    "/{group_key}/options/{option_id}/merge",
    response_model=Envelope[MergeOptionsResponse],
    summary="Merge an option into another",
)
async def merge_options(
    request: Request,
    group_key: str,
    option_id: str,
    body: MergeOptionsBody,
    user: AdminUser,
    use_case: FromDishka[MergeOptionsUseCase],
) -> Envelope:
    """Re-point every reference from this option to the target.

    The source is archived afterwards, or soft-deleted with
    `delete_source=true`.

    Example:
        POST /v1/metadata/topic_tag/options/<source>/merge
        {"target_option_id": "<target>"}
    """
    group = parse_group_key(group_key)
    with logfire.span(
        "api.merge_options",
        group_key=group.value,
        source_option_id=option_id,
        target_option_id=body.target_option_id,
    ):
        result = await use_case.execute(
            MergeOptionsRequest(
                group_key=group,
                source_option_id=option_id,
                target_option_id=body.target_option_id,
                user_id=user.user_id,
                delete_source=body.delete_source,
            )
        )
        return envelope(request, result)
