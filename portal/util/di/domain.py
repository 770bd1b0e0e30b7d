"""Domain layer DI providers."""

from dishka import Scope, provide

from portal.config import MetadataSettings, Settings
from portal.domain.repository import (
    ContentItemRepository,
    CourseRepository,
    MetadataOptionRepository,
)
from portal.domain.service import (
    AuthService,
    MetadataService,
    MigrationService,
    ReferenceService,
)
from portal.util.di.base import ProviderBase
from portal.util.jwt import CognitoTokenVerifier


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are REQUEST-scoped to align with repository/session lifecycle.
    Each HTTP request gets fresh service instances with their own transaction.
    """

    scope = Scope.REQUEST

    @provide
    def get_auth_service(
        self, settings: Settings, token_verifier: CognitoTokenVerifier
    ) -> AuthService:
        """Provide authentication domain service."""
        return AuthService(settings=settings, token_verifier=token_verifier)

    @provide
    def get_reference_service(
        self,
        course_repository: CourseRepository,
        content_item_repository: ContentItemRepository,
        settings: MetadataSettings,
    ) -> ReferenceService:
        """Provide reference domain service."""
        return ReferenceService(
            course_repository=course_repository,
            content_item_repository=content_item_repository,
            settings=settings,
        )

    @provide
    def get_metadata_service(
        self,
        option_repository: MetadataOptionRepository,
        reference_service: ReferenceService,
        settings: MetadataSettings,
    ) -> MetadataService:
        """Provide metadata domain service."""
        return MetadataService(
            option_repository=option_repository,
            reference_service=reference_service,
            settings=settings,
        )

    @provide
    def get_migration_service(
        self,
        course_repository: CourseRepository,
        content_item_repository: ContentItemRepository,
        option_repository: MetadataOptionRepository,
        settings: MetadataSettings,
    ) -> MigrationService:
        """Provide legacy migration domain service."""
        return MigrationService(
            course_repository=course_repository,
            content_item_repository=content_item_repository,
            option_repository=option_repository,
            settings=settings,
        )
