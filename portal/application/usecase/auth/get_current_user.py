"""Get current user use case."""

from pydantic import BaseModel

from portal.domain.service import AuthService
from portal.domain.value import UserRole


class GetCurrentUserRequest(BaseModel):
    """Get current user request.

    Carries the raw credential headers; which ones are honoured depends on
    whether an identity provider is configured.
    """

    authorization: str | None = None
    dev_role: str | None = None  # x-dev-role
    dev_user_id: str | None = None  # x-dev-user-id
    required_role: UserRole = UserRole.VIEWER


class GetCurrentUserResponse(BaseModel):
    """Get current user response."""

    user_id: str
    email: str | None
    role: UserRole


class GetCurrentUserUseCase:
    """Use case for resolving and authorizing the caller of a request."""

    def __init__(self, auth_service: AuthService) -> None:
        """Initialize get current user use case.

        Args:
            auth_service: Authentication domain service
        """
        self.auth_service = auth_service

    async def execute(self, request: GetCurrentUserRequest) -> GetCurrentUserResponse:
        """Execute get current user flow.

        Steps:
        1. Authenticate from the bearer token (or dev headers locally)
        2. Check the caller's tier against the required minimum

        Args:
            request: Credential headers and minimum role

        Returns:
            Caller identity and role

        Raises:
            AuthenticationError: If the caller cannot be authenticated
            InsufficientRoleError: If the caller's tier is too low
        """
        user = await self.auth_service.authenticate(
            request.authorization,
            dev_role=request.dev_role,
            dev_user_id=request.dev_user_id,
        )
        self.auth_service.authorize(user, request.required_role)
        return GetCurrentUserResponse(user_id=user.user_id, email=user.email, role=user.role)
