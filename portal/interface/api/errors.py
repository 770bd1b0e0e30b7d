"""Translation of errors into the API error envelope.

Domain errors are mapped to a status and code here, at the boundary. Store
exception text never reaches the caller: anything unrecognised becomes a
generic 500.
"""

from typing import Any

import logfire
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from portal.domain.error import (
    AuthenticationError,
    BatchBudgetExceededError,
    ConflictError,
    DomainError,
    InsufficientRoleError,
    InvalidMergeError,
    NotFoundError,
    OptionInUseError,
    ValidationError,
)
from portal.interface.api.middleware import REQUEST_ID_HEADER, get_request_id
from portal.interface.error import ApiError

DELETE_SUGGESTION = (
    "Archive the option instead, or migrate references to another option first"
)

_HTTP_CODES = {
    status.HTTP_400_BAD_REQUEST: "VALIDATION_ERROR",
    status.HTTP_401_UNAUTHORIZED: "UNAUTHORIZED",
    status.HTTP_403_FORBIDDEN: "FORBIDDEN",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
}


def to_api_error(exc: DomainError) -> ApiError:
    """Map a domain error onto status, code, message and details."""
    if isinstance(exc, AuthenticationError):
        # Never tell the caller which check failed
        return ApiError(
            status.HTTP_401_UNAUTHORIZED, "UNAUTHORIZED", "Authentication required"
        )
    if isinstance(exc, InsufficientRoleError):
        return ApiError(status.HTTP_403_FORBIDDEN, "FORBIDDEN", str(exc))
    if isinstance(exc, ValidationError):
        return ApiError(
            status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR", str(exc), exc.details
        )
    if isinstance(exc, InvalidMergeError):
        return ApiError(status.HTTP_400_BAD_REQUEST, "INVALID_MERGE", str(exc))
    if isinstance(exc, NotFoundError):
        return ApiError(status.HTTP_404_NOT_FOUND, "NOT_FOUND", str(exc))
    if isinstance(exc, OptionInUseError):
        return ApiError(
            status.HTTP_409_CONFLICT,
            "OPTION_IN_USE",
            str(exc),
            {
                "used_by_courses": exc.used_by_courses,
                "used_by_resources": exc.used_by_resources,
                "sample_course_ids": exc.sample_course_ids,
                "sample_resource_ids": exc.sample_resource_ids,
                "suggestion": DELETE_SUGGESTION,
            },
        )
    if isinstance(exc, ConflictError):
        return ApiError(status.HTTP_409_CONFLICT, "CONFLICT", str(exc))
    if isinstance(exc, BatchBudgetExceededError):
        return ApiError(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "BATCH_LIMIT_EXCEEDED",
            str(exc),
            {
                "operation": exc.operation,
                "pages": exc.pages,
                "elapsed_seconds": round(exc.elapsed_seconds, 3),
            },
        )
    return ApiError(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", "Internal server error"
    )


def error_response(request: Request, error: ApiError) -> JSONResponse:
    """Render the error envelope."""
    body: dict[str, Any] = {"code": error.code, "message": error.message}
    if error.details is not None:
        body["details"] = error.details
    request_id = get_request_id(request)
    return JSONResponse(
        status_code=error.status_code,
        content={"error": body, "request_id": request_id},
        headers={REQUEST_ID_HEADER: request_id},
    )


async def handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
    return error_response(request, exc)


async def handle_domain_error(request: Request, exc: DomainError) -> JSONResponse:
    error = to_api_error(exc)
    if isinstance(exc, AuthenticationError):
        logfire.warn(
            "Request not authenticated",
            reason=exc.reason,
            path=request.url.path,
        )
    elif error.status_code >= 500:
        logfire.error(
            "Unhandled domain error",
            error_type=type(exc).__name__,
            error=str(exc),
            path=request.url.path,
        )
    return error_response(request, error)


async def handle_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())),
            "message": error.get("msg", ""),
        }
        for error in exc.errors()
    ]
    message = ", ".join(f"{e['field']}: {e['message']}" for e in errors)
    return error_response(
        request,
        ApiError(
            status.HTTP_400_BAD_REQUEST,
            "VALIDATION_ERROR",
            message or "Invalid request",
            {"errors": errors},
        ),
    )


async def handle_http_exception(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    code = _HTTP_CODES.get(exc.status_code, "HTTP_ERROR")
    return error_response(request, ApiError(exc.status_code, code, str(exc.detail)))


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logfire.exception(
        "Unhandled error",
        error_type=type(exc).__name__,
        path=request.url.path,
    )
    return error_response(
        request,
        ApiError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "INTERNAL_ERROR",
            "Internal server error",
        ),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Install the envelope renderers on an application."""
    app.add_exception_handler(ApiError, handle_api_error)
    app.add_exception_handler(DomainError, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected_error)
