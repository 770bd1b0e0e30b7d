"""Authenticated caller."""

from portal.domain.model.common import DomainModel
from portal.domain.value import UserId, UserRole


class AuthenticatedUser(DomainModel):
    """Caller identity resolved for a single request.

    Created by authentication, read by route handlers, never mutated.
    """

    user_id: UserId
    email: str | None = None
    role: UserRole = UserRole.VIEWER
