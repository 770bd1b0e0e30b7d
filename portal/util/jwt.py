"""JWT token utilities.

Tokens are verified against the identity provider's published signing keys
(JWKS). Group membership arrives in several claim names and several shapes;
`normalize_groups` is the only place those shapes are interpreted.
"""

import json
from typing import Any, Protocol

import jwt
from jwt import PyJWKClient
from jwt.exceptions import PyJWKClientConnectionError, PyJWKClientError

from portal.config import AuthSettings

# Claim names that may carry group membership, in lookup order
GROUP_CLAIM_KEYS = ("cognito:groups", "groups", "cognito_groups")


class JWTError(Exception):
    """Token is malformed, expired, or fails signature/claim checks."""

    pass


class JWKSError(Exception):
    """Signing keys could not be fetched from the identity provider."""

    pass


class SigningKeySource(Protocol):
    """Anything that resolves the signing key for a token (PyJWKClient does)."""

    def get_signing_key_from_jwt(self, token: str) -> Any: ...


def _group_name(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value).strip()


def _normalize_list(values: list[Any]) -> list[str]:
    names = [_group_name(value) for value in values]
    return [name for name in names if name]


def normalize_groups(value: Any) -> list[str]:
    """Convert a group claim of any shape into a list of group names.

    - list: each element stringified and trimmed, empty ones dropped
    - str: JSON-decoded when possible; a decoded list is normalized like a
      list, a decoded scalar becomes a single group; otherwise the trimmed
      string itself is the single group
    - any other truthy value: stringified as a single group
    - missing / falsy: empty list

    Args:
        value: Raw claim value

    Returns:
        Ordered list of non-empty, trimmed group names
    """
    if not value:
        return []

    if isinstance(value, (list, tuple)):
        return _normalize_list(list(value))

    if isinstance(value, str):
        trimmed = value.strip()
        if not trimmed:
            return []
        try:
            parsed = json.loads(trimmed)
        except ValueError:
            return [trimmed]
        if isinstance(parsed, list):
            return _normalize_list(parsed)
        if parsed is None:
            return []
        if isinstance(parsed, str):
            return [parsed.strip()] if parsed.strip() else []
        # Numbers and booleans keep their original spelling
        return [trimmed]

    name = _group_name(value)
    return [name] if name else []


def extract_groups(claims: dict[str, Any]) -> list[str]:
    """Return the first non-empty group list found under a known claim name.

    Args:
        claims: Verified token claims

    Returns:
        Normalized group names (empty if no claim carries any)
    """
    for key in GROUP_CLAIM_KEYS:
        groups = normalize_groups(claims.get(key))
        if groups:
            return groups
    return []


class CognitoTokenVerifier:
    """Verify Cognito-issued tokens against the user pool's signing keys.

    Constructed once per process; PyJWKClient caches the key set for
    `jwks_cache_seconds`.
    """

    def __init__(
        self,
        settings: AuthSettings,
        key_source: SigningKeySource | None = None,
    ) -> None:
        """Initialize verifier.

        Args:
            settings: Authentication settings with user pool configuration
            key_source: Signing key resolver (defaults to a PyJWKClient on the
                user pool's JWKS URL)
        """
        self.settings = settings
        self.key_source = key_source or PyJWKClient(
            settings.jwks_url,
            cache_keys=True,
            lifespan=settings.jwks_cache_seconds,
        )

    def verify(self, token: str) -> dict[str, Any]:
        """Verify signature, issuer, audience, expiry and token_use.

        Args:
            token: Encoded JWT

        Returns:
            Verified claims

        Raises:
            JWTError: If the token is malformed, expired or fails a claim check
            JWKSError: If the signing keys could not be fetched
        """
        if not self.settings.is_configured:
            raise JWKSError("Cognito user pool ID and client ID must be configured")

        try:
            signing_key = self.key_source.get_signing_key_from_jwt(token)
        except PyJWKClientConnectionError as e:
            raise JWKSError(f"Could not fetch signing keys: {e}") from e
        except PyJWKClientError as e:
            # Unknown kid: token from another user pool, or a rotated key
            raise JWTError(f"No signing key for token: {e}") from e
        except jwt.DecodeError as e:
            raise JWTError("Malformed token") from e

        is_id_token = self.settings.token_use == "id"
        try:
            claims = jwt.decode(
                token,
                signing_key.key,
                algorithms=["RS256"],
                issuer=self.settings.issuer,
                audience=self.settings.cognito_client_id if is_id_token else None,
                options={
                    "require": ["exp", "iss", "sub"],
                    "verify_aud": is_id_token,
                },
            )
        except jwt.ExpiredSignatureError as e:
            raise JWTError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            raise JWTError(f"Invalid token: {e}") from e

        if claims.get("token_use") != self.settings.token_use:
            raise JWTError("Unexpected token_use")
        if not is_id_token and claims.get("client_id") != self.settings.cognito_client_id:
            raise JWTError("Token was issued to a different client")

        return claims
