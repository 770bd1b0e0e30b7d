"""HTTP middleware."""

from collections.abc import Callable
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.types import ASGIApp

REQUEST_ID_HEADER = "x-request-id"


def get_request_id(request: Request) -> str:
    """Request ID assigned by RequestIDMiddleware (or the caller's header)."""
    request_id = getattr(request.state, "request_id", None)
    return request_id or request.headers.get(REQUEST_ID_HEADER) or str(uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assign every request an ID and echo it on the response.

    A caller-supplied `x-request-id` is kept; otherwise a uuid4 is generated.
    The ID is stored on `request.state.request_id` for response bodies.
    """

    def __init__(self, app: ASGIApp, header_name: str = REQUEST_ID_HEADER) -> None:
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable):
        request_id = request.headers.get(self.header_name) or str(uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers[self.header_name] = request_id
        return response
