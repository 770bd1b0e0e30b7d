"""Authentication domain service."""

import asyncio
from typing import Any

import logfire

from portal.config import Settings
from portal.domain.error import (
    IdentityProviderError,
    InsufficientRoleError,
    MissingCredentialsError,
    TokenVerificationError,
)
from portal.domain.model import AuthenticatedUser
from portal.domain.value import UserId, UserRole
from portal.util.jwt import (
    CognitoTokenVerifier,
    JWKSError,
    JWTError,
    extract_groups,
    normalize_groups,
)

from .base import Service

# Group name (lower-cased) -> role, most privileged first
ROLE_PRECEDENCE: tuple[tuple[str, UserRole], ...] = (
    ("admin", UserRole.ADMIN),
    ("approver", UserRole.APPROVER),
    ("contributor", UserRole.CONTRIBUTOR),
    ("viewer", UserRole.VIEWER),
)

DEFAULT_DEV_USER_ID = "dev-user"


def extract_role_from_groups(groups: Any) -> UserRole:
    """Map group membership onto the highest role tier present.

    Matching is case-insensitive. No recognised group yields Viewer.

    Args:
        groups: Group claim in any shape `normalize_groups` accepts

    Returns:
        Role tier
    """
    names = {name.lower() for name in normalize_groups(groups)}
    for group, role in ROLE_PRECEDENCE:
        if group in names:
            return role
    return UserRole.VIEWER


def parse_bearer_token(authorization: str | None) -> str:
    """Extract the token from an `Authorization: Bearer <token>` header.

    Raises:
        MissingCredentialsError: If the header is absent, blank, or not Bearer
    """
    if not authorization or not authorization.strip():
        raise MissingCredentialsError("No authorization header")
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise MissingCredentialsError("Authorization header is not a bearer token")
    return token.strip()


class AuthService(Service):
    """Domain service resolving callers to role tiers.

    With a Cognito user pool configured, callers must present a verified
    bearer token. Without one, outside staging/production and only while
    dev headers are allowed, `x-dev-role` / `x-dev-user-id` are trusted.
    """

    def __init__(
        self, settings: Settings, token_verifier: CognitoTokenVerifier
    ) -> None:
        """Initialize auth service.

        Args:
            settings: Application settings
            token_verifier: Process-wide verifier for Cognito tokens
        """
        self.settings = settings
        self.token_verifier = token_verifier

    async def authenticate(
        self,
        authorization: str | None,
        dev_role: str | None = None,
        dev_user_id: str | None = None,
    ) -> AuthenticatedUser:
        """Resolve the caller of a request.

        Args:
            authorization: Raw Authorization header
            dev_role: `x-dev-role` header (dev fallback only)
            dev_user_id: `x-dev-user-id` header (dev fallback only)

        Returns:
            Authenticated caller

        Raises:
            MissingCredentialsError: If no bearer token was supplied
            TokenVerificationError: If the token fails verification
            IdentityProviderError: If verification cannot run
        """
        if self.settings.auth.is_configured:
            return await self._authenticate_token(authorization)

        if self.settings.dev_headers_enabled:
            return self._authenticate_dev(dev_role, dev_user_id)

        logfire.error(
            "Identity provider not configured",
            environment=self.settings.environment,
        )
        raise IdentityProviderError("Identity provider is not configured")

    async def _authenticate_token(self, authorization: str | None) -> AuthenticatedUser:
        with logfire.span("auth_service.authenticate_token"):
            token = parse_bearer_token(authorization)
            try:
                # PyJWKClient fetches keys with blocking I/O on a cache miss
                claims = await asyncio.to_thread(self.token_verifier.verify, token)
            except JWKSError as e:
                logfire.error("Signing keys unavailable", error=str(e))
                raise IdentityProviderError(str(e)) from e
            except JWTError as e:
                logfire.warn("Token rejected", error=str(e))
                raise TokenVerificationError(str(e)) from e

            groups = extract_groups(claims)
            user = AuthenticatedUser(
                user_id=UserId(str(claims["sub"])),
                email=claims.get("email"),
                role=extract_role_from_groups(groups),
            )
            logfire.info(
                "Caller authenticated",
                user_id=user.user_id,
                role=user.role.value,
                group_count=len(groups),
            )
            return user

    def _authenticate_dev(
        self, dev_role: str | None, dev_user_id: str | None
    ) -> AuthenticatedUser:
        role = UserRole.VIEWER
        if dev_role:
            try:
                role = UserRole(dev_role.strip())
            except ValueError:
                logfire.warn("Invalid dev role header, using Viewer", dev_role=dev_role)

        user_id = (dev_user_id or "").strip() or DEFAULT_DEV_USER_ID
        logfire.debug("Dev headers authenticated caller", user_id=user_id, role=role.value)
        return AuthenticatedUser(user_id=UserId(user_id), role=role)

    def authorize(self, user: AuthenticatedUser, minimum: UserRole) -> None:
        """Require at least `minimum` tier.

        Raises:
            InsufficientRoleError: If the caller's tier is lower
        """
        if not user.role.satisfies(minimum):
            logfire.warn(
                "Role check failed",
                user_id=user.user_id,
                role=user.role.value,
                required=minimum.value,
            )
            raise InsufficientRoleError(required=minimum.value, actual=user.role.value)
