"""Route-level authentication and role gate."""

from typing import Annotated

from dishka import AsyncContainer
from fastapi import Depends, Request

from portal.application.usecase.auth import (
    GetCurrentUserRequest,
    GetCurrentUserResponse,
    GetCurrentUserUseCase,
)
from portal.domain.value import UserRole

DEV_ROLE_HEADER = "x-dev-role"
DEV_USER_ID_HEADER = "x-dev-user-id"


def require_role(minimum: UserRole):
    """Build a dependency that authenticates the caller and checks their tier.

    Usage:
        @router.post("/...")
        async def handler(user: AdminUser): ...

    Args:
        minimum: Lowest role tier admitted

    Returns:
        FastAPI dependency resolving to the caller
    """

    async def current_user(request: Request) -> GetCurrentUserResponse:
        # Request-scoped container opened by dishka's middleware
        container: AsyncContainer = request.state.dishka_container
        use_case = await container.get(GetCurrentUserUseCase)
        return await use_case.execute(
            GetCurrentUserRequest(
                authorization=request.headers.get("authorization"),
                dev_role=request.headers.get(DEV_ROLE_HEADER),
                dev_user_id=request.headers.get(DEV_USER_ID_HEADER),
                required_role=minimum,
            )
        )

    current_user.__name__ = f"require_{minimum.value.lower()}"
    return current_user


ViewerUser = Annotated[GetCurrentUserResponse, Depends(require_role(UserRole.VIEWER))]
AdminUser = Annotated[GetCurrentUserResponse, Depends(require_role(UserRole.ADMIN))]
