"""Application layer DI providers."""

from dishka import Scope, provide

from portal.application.usecase.auth import GetCurrentUserUseCase
from portal.application.usecase.metadata import (
    CreateOptionUseCase,
    DeleteOptionUseCase,
    GetOptionUseCase,
    GetUsageUseCase,
    ListOptionsUseCase,
    MergeOptionsUseCase,
    UpdateOptionUseCase,
)
from portal.application.usecase.migration import (
    ApplyMigrationUseCase,
    ScanLegacyValuesUseCase,
)
from portal.domain.service import AuthService, MetadataService, MigrationService
from portal.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed."""

    # Auth use cases
    @provide(scope=Scope.REQUEST)
    def get_current_user_use_case(
        self, auth_service: AuthService
    ) -> GetCurrentUserUseCase:
        """Provide get current user use case."""
        return GetCurrentUserUseCase(auth_service=auth_service)

    # Metadata use cases
    @provide(scope=Scope.REQUEST)
    def get_list_options_use_case(
        self, metadata_service: MetadataService
    ) -> ListOptionsUseCase:
        """Provide list options use case."""
        return ListOptionsUseCase(metadata_service=metadata_service)

    @provide(scope=Scope.REQUEST)
    def get_get_option_use_case(
        self, metadata_service: MetadataService
    ) -> GetOptionUseCase:
        """Provide get option use case."""
        return GetOptionUseCase(metadata_service=metadata_service)

    @provide(scope=Scope.REQUEST)
    def get_create_option_use_case(
        self, metadata_service: MetadataService
    ) -> CreateOptionUseCase:
        """Provide create option use case."""
        return CreateOptionUseCase(metadata_service=metadata_service)

    @provide(scope=Scope.REQUEST)
    def get_update_option_use_case(
        self, metadata_service: MetadataService
    ) -> UpdateOptionUseCase:
        """Provide update option use case."""
        return UpdateOptionUseCase(metadata_service=metadata_service)

    @provide(scope=Scope.REQUEST)
    def get_usage_use_case(self, metadata_service: MetadataService) -> GetUsageUseCase:
        """Provide option usage use case."""
        return GetUsageUseCase(metadata_service=metadata_service)

    @provide(scope=Scope.REQUEST)
    def get_delete_option_use_case(
        self, metadata_service: MetadataService
    ) -> DeleteOptionUseCase:
        """Provide delete option use case."""
        return DeleteOptionUseCase(metadata_service=metadata_service)

    @provide(scope=Scope.REQUEST)
    def get_merge_options_use_case(
        self, metadata_service: MetadataService
    ) -> MergeOptionsUseCase:
        """Provide merge options use case."""
        return MergeOptionsUseCase(metadata_service=metadata_service)

    # Legacy migration use cases
    @provide(scope=Scope.REQUEST)
    def get_scan_legacy_values_use_case(
        self, migration_service: MigrationService
    ) -> ScanLegacyValuesUseCase:
        """Provide legacy value scan use case."""
        return ScanLegacyValuesUseCase(migration_service=migration_service)

    @provide(scope=Scope.REQUEST)
    def get_apply_migration_use_case(
        self, migration_service: MigrationService
    ) -> ApplyMigrationUseCase:
        """Provide apply migration use case."""
        return ApplyMigrationUseCase(migration_service=migration_service)
