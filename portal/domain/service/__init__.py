"""Domain services."""

from .auth_service import AuthService, extract_role_from_groups, parse_bearer_token
from .base import Service
from .batch import BatchBudget, scan_pages
from .metadata_service import (
    MergeResult,
    MetadataService,
    OptionListPage,
    decode_cursor,
    encode_cursor,
)
from .migration_service import (
    LegacyScan,
    LegacyValueCount,
    MigrationMapping,
    MigrationResult,
    MigrationService,
    migration_changes,
)
from .reference_service import ReferenceService

__all__ = [
    "AuthService",
    "BatchBudget",
    "LegacyScan",
    "LegacyValueCount",
    "MergeResult",
    "MetadataService",
    "MigrationMapping",
    "MigrationResult",
    "MigrationService",
    "OptionListPage",
    "ReferenceService",
    "Service",
    "decode_cursor",
    "encode_cursor",
    "extract_role_from_groups",
    "migration_changes",
    "parse_bearer_token",
    "scan_pages",
]
