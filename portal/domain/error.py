"""Domain layer errors."""

from typing import Any


class DomainError(Exception):
    """Base domain error."""

    pass


class ValidationError(DomainError):
    """Input violates a domain rule (bad label, unknown parent, bad mapping)."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.details = details
        super().__init__(message)


class ConflictError(DomainError):
    """Raised when a write collides with existing data (e.g. duplicate slug)."""

    pass


class NotFoundError(DomainError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class InvalidMergeError(DomainError):
    """Raised when two options cannot be merged."""

    pass


class OptionInUseError(DomainError):
    """Raised when deleting an option that Courses or Content still reference."""

    def __init__(
        self,
        option_id: str,
        used_by_courses: int,
        used_by_resources: int,
        sample_course_ids: list[str],
        sample_resource_ids: list[str],
    ):
        self.option_id = option_id
        self.used_by_courses = used_by_courses
        self.used_by_resources = used_by_resources
        self.sample_course_ids = sample_course_ids
        self.sample_resource_ids = sample_resource_ids
        total = used_by_courses + used_by_resources
        super().__init__(f"Cannot delete option: it is used by {total} item(s)")


class BatchBudgetExceededError(DomainError):
    """Raised when a table traversal runs out of its page or time budget."""

    def __init__(self, operation: str, pages: int, elapsed_seconds: float):
        self.operation = operation
        self.pages = pages
        self.elapsed_seconds = elapsed_seconds
        super().__init__(
            f"{operation} stopped after {pages} page(s) in {elapsed_seconds:.1f}s; "
            "the operation is safe to re-run"
        )


class AuthenticationError(DomainError):
    """Base class for credential failures (all surface as 401)."""

    reason = "authentication_failed"


class MissingCredentialsError(AuthenticationError):
    """No bearer token was supplied."""

    reason = "missing_credentials"


class TokenVerificationError(AuthenticationError):
    """Token was supplied but failed signature or claim checks."""

    reason = "invalid_token"


class IdentityProviderError(AuthenticationError):
    """Verification could not run (signing keys unavailable, IdP not configured)."""

    reason = "identity_provider_unavailable"


class InsufficientRoleError(DomainError):
    """Caller's role tier is below the route's minimum."""

    def __init__(self, required: str, actual: str):
        self.required = required
        self.actual = actual
        super().__init__(f"Requires {required} role or higher. Current role: {actual}")
