"""Interface layer errors."""

from typing import Any


class InterfaceError(Exception):
    """Base interface error."""

    pass


class ApiError(InterfaceError):
    """Error rendered to the caller as `{"error": {code, message, details?}}`."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details
        super().__init__(message)
