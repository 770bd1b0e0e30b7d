"""Metadata taxonomy use cases."""

from .common import MetadataOptionResponse
from .create_option import CreateOptionRequest, CreateOptionResponse, CreateOptionUseCase
from .delete_option import DeleteOptionRequest, DeleteOptionResponse, DeleteOptionUseCase
from .get_option import GetOptionRequest, GetOptionResponse, GetOptionUseCase
from .get_usage import GetUsageRequest, GetUsageResponse, GetUsageUseCase
from .list_options import ListOptionsRequest, ListOptionsResponse, ListOptionsUseCase
from .merge_options import MergeOptionsRequest, MergeOptionsResponse, MergeOptionsUseCase
from .update_option import UpdateOptionRequest, UpdateOptionResponse, UpdateOptionUseCase

__all__ = [
    "CreateOptionRequest",
    "CreateOptionResponse",
    "CreateOptionUseCase",
    "DeleteOptionRequest",
    "DeleteOptionResponse",
    "DeleteOptionUseCase",
    "GetOptionRequest",
    "GetOptionResponse",
    "GetOptionUseCase",
    "GetUsageRequest",
    "GetUsageResponse",
    "GetUsageUseCase",
    "ListOptionsRequest",
    "ListOptionsResponse",
    "ListOptionsUseCase",
    "MergeOptionsRequest",
    "MergeOptionsResponse",
    "MergeOptionsUseCase",
    "MetadataOptionResponse",
    "UpdateOptionRequest",
    "UpdateOptionResponse",
    "UpdateOptionUseCase",
]
