"""Authentication routes."""

import logfire
from fastapi import APIRouter, Request

from portal.application.usecase.auth import GetCurrentUserResponse
from portal.interface.api.auth import ViewerUser
from portal.interface.api.schemas import Envelope, envelope

router = APIRouter(prefix="/v1/auth", tags=["auth"])


@router.get(
    "/me",
    response_model=Envelope[GetCurrentUserResponse],
    summary="Get the authenticated caller",
)
async def get_me(request: Request, user: ViewerUser) -> Envelope:
    """Return the caller's identity and resolved role tier.

    The UI uses the role to decide which admin screens to show.
    """
    with logfire.span("api.get_me", user_id=user.user_id, role=user.role.value):
        return envelope(request, user)
