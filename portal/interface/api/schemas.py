"""Response envelope shared by all v1 routes."""

from typing import Generic, TypeVar

from fastapi import Request
from pydantic import BaseModel

from portal.interface.api.middleware import get_request_id

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """Success body: `{"data": ..., "request_id": ...}`."""

    data: T
    request_id: str


def envelope(request: Request, data: T) -> Envelope:
    """Wrap a payload with the request's ID."""
    return Envelope(data=data, request_id=get_request_id(request))
