"""Unit tests for AuthService and role resolution."""

import pytest

from portal.config import AuthSettings, Settings
from portal.domain.error import (
    IdentityProviderError,
    InsufficientRoleError,
    MissingCredentialsError,
    TokenVerificationError,
)
from portal.domain.model import AuthenticatedUser
from portal.domain.service import (
    AuthService,
    extract_role_from_groups,
    parse_bearer_token,
)
from portal.domain.value import UserId, UserRole
from portal.util.jwt import JWKSError, JWTError


class StubVerifier:
    """Returns fixed claims, or raises the configured error."""

    def __init__(self, claims=None, error: Exception | None = None):
        self.claims = claims or {}
        self.error = error
        self.tokens: list[str] = []

    def verify(self, token: str):
        self.tokens.append(token)
        if self.error:
            raise self.error
        return self.claims


def configured_settings(**overrides) -> Settings:
    return Settings(
        environment="development",
        auth=AuthSettings(cognito_user_pool_id="pool", cognito_client_id="client"),
        **overrides,
    )


class TestExtractRoleFromGroups:
    """Tests for extract_role_from_groups."""

    @pytest.mark.parametrize(
        "groups,expected",
        [
            (["Admin"], UserRole.ADMIN),
            (["viewer", "APPROVER"], UserRole.APPROVER),
            (["Contributor", "Admin"], UserRole.ADMIN),
            ('["Contributor"]', UserRole.CONTRIBUTOR),
            ("Approver", UserRole.APPROVER),
            (["Sales", "Marketing"], UserRole.VIEWER),
            ([], UserRole.VIEWER),
            (None, UserRole.VIEWER),
        ],
    )
    def test_highest_recognised_group_wins(self, groups, expected):
        assert extract_role_from_groups(groups) == expected


class TestParseBearerToken:
    def test_extracts_token(self):
        assert parse_bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"

    def test_scheme_is_case_insensitive(self):
        assert parse_bearer_token("bearer abc") == "abc"

    @pytest.mark.parametrize("header", [None, "", "   ", "Bearer", "Basic abc"])
    def test_missing_or_other_scheme(self, header):
        with pytest.raises(MissingCredentialsError):
            parse_bearer_token(header)


class TestRoleGate:
    """Tests for AuthService.authorize."""

    @pytest.mark.parametrize(
        "role,minimum,allowed",
        [
            (UserRole.ADMIN, UserRole.ADMIN, True),
            (UserRole.ADMIN, UserRole.VIEWER, True),
            (UserRole.APPROVER, UserRole.CONTRIBUTOR, True),
            (UserRole.CONTRIBUTOR, UserRole.APPROVER, False),
            (UserRole.VIEWER, UserRole.ADMIN, False),
            (UserRole.VIEWER, UserRole.VIEWER, True),
        ],
    )
    def test_tier_ordering(self, role, minimum, allowed):
        service = AuthService(Settings(), StubVerifier())
        user = AuthenticatedUser(user_id=UserId("u1"), role=role)

        if allowed:
            service.authorize(user, minimum)
        else:
            with pytest.raises(InsufficientRoleError) as exc_info:
                service.authorize(user, minimum)
            assert exc_info.value.required == minimum.value
            assert exc_info.value.actual == role.value


class TestAuthenticateWithToken:
    """Tests for the verified-token path."""

    @pytest.mark.asyncio
    async def test_resolves_user_from_claims(self):
        verifier = StubVerifier(
            claims={
                "sub": "user-123",
                "email": "user@example.com",
                "cognito:groups": ["Contributor", "Approver"],
            }
        )
        service = AuthService(configured_settings(), verifier)

        user = await service.authenticate("Bearer token-1")

        assert user.user_id == "user-123"
        assert user.email == "user@example.com"
        assert user.role == UserRole.APPROVER
        assert verifier.tokens == ["token-1"]

    @pytest.mark.asyncio
    async def test_dev_headers_are_ignored_once_configured(self):
        service = AuthService(configured_settings(), StubVerifier())

        with pytest.raises(MissingCredentialsError):
            await service.authenticate(None, dev_role="Admin")

    @pytest.mark.asyncio
    async def test_rejected_token(self):
        service = AuthService(
            configured_settings(), StubVerifier(error=JWTError("Token has expired"))
        )

        with pytest.raises(TokenVerificationError):
            await service.authenticate("Bearer stale")

    @pytest.mark.asyncio
    async def test_unreachable_signing_keys(self):
        service = AuthService(
            configured_settings(), StubVerifier(error=JWKSError("timed out"))
        )

        with pytest.raises(IdentityProviderError):
            await service.authenticate("Bearer token")


def dev_settings(environment: str = "development") -> Settings:
    return Settings(
        environment=environment, auth=AuthSettings(allow_dev_headers=True)
    )


class TestAuthenticateWithDevHeaders:
    """Tests for the local development fallback."""

    @pytest.mark.asyncio
    async def test_dev_role_and_user(self):
        service = AuthService(dev_settings(), StubVerifier())

        user = await service.authenticate(None, dev_role="Admin", dev_user_id="alice")

        assert user.user_id == "alice"
        assert user.role == UserRole.ADMIN

    @pytest.mark.asyncio
    async def test_defaults_to_viewer(self):
        service = AuthService(dev_settings(), StubVerifier())

        user = await service.authenticate(None)

        assert user.user_id == "dev-user"
        assert user.role == UserRole.VIEWER

    @pytest.mark.asyncio
    async def test_unknown_role_falls_back_to_viewer(self):
        service = AuthService(dev_settings(), StubVerifier())

        user = await service.authenticate(None, dev_role="Superuser")

        assert user.role == UserRole.VIEWER

    @pytest.mark.asyncio
    @pytest.mark.parametrize("environment", ["staging", "production"])
    async def test_never_trusted_in_production_like_environments(self, environment):
        service = AuthService(dev_settings(environment), StubVerifier())

        with pytest.raises(IdentityProviderError):
            await service.authenticate(None, dev_role="Admin")

    @pytest.mark.asyncio
    async def test_off_unless_enabled(self):
        settings = Settings(environment="development", auth=AuthSettings())
        service = AuthService(settings, StubVerifier())

        assert settings.auth.allow_dev_headers is False
        with pytest.raises(IdentityProviderError):
            await service.authenticate(None, dev_role="Admin")

    @pytest.mark.asyncio
    async def test_disabled_by_setting(self):
        settings = Settings(
            environment="development", auth=AuthSettings(allow_dev_headers=False)
        )
        service = AuthService(settings, StubVerifier())

        with pytest.raises(IdentityProviderError):
            await service.authenticate(None, dev_role="Admin")
