"""Legacy metadata migration use cases."""

from .apply_migration import ApplyMigrationRequest, ApplyMigrationResponse, ApplyMigrationUseCase
from .scan_legacy_values import (
    ScanLegacyValuesRequest,
    ScanLegacyValuesResponse,
    ScanLegacyValuesUseCase,
)

__all__ = [
    "ApplyMigrationRequest",
    "ApplyMigrationResponse",
    "ApplyMigrationUseCase",
    "ScanLegacyValuesRequest",
    "ScanLegacyValuesResponse",
    "ScanLegacyValuesUseCase",
]
