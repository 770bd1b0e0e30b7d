"""Core DI providers (non-mockable)."""

from dishka import Scope, provide

from portal.config import AuthSettings, MetadataSettings, Settings
from portal.util.di.base import ProviderBase
from portal.util.jwt import CognitoTokenVerifier


class ProdConfigProvider(ProviderBase):
    """Production config provider - concrete, no mocks needed.

    Settings are loaded from environment variables and .env file automatically.
    """

    @provide(scope=Scope.APP)
    def provide_settings(self) -> Settings:
        """Provide application settings from environment."""
        return Settings()

    @provide(scope=Scope.APP)
    def provide_auth_settings(self, settings: Settings) -> AuthSettings:
        """Provide auth settings."""
        return settings.auth

    @provide(scope=Scope.APP)
    def provide_metadata_settings(self, settings: Settings) -> MetadataSettings:
        """Provide metadata settings."""
        return settings.metadata

    @provide(scope=Scope.APP)
    def provide_token_verifier(self, auth_settings: AuthSettings) -> CognitoTokenVerifier:
        """Provide the process-wide token verifier (holds the JWKS cache)."""
        return CognitoTokenVerifier(auth_settings)
