"""Token verification implementations.

Provides:
- TokenVerifier: Protocol for token verification
- SupabaseJwksVerifier: Verifier using Supabase JWKS (used in all environments)
- decode_session_token: Shared claim validation used by every verifier

Note: Test-only verifiers are in tests/support/test_verifier.py
"""

import logging
import threading
from typing import Any, Protocol
from uuid import UUID

import jwt
from jwt import PyJWKClient
from jwt.exceptions import (
    DecodeError,
    ExpiredSignatureError,
    InvalidAudienceError,
    InvalidIssuerError,
    InvalidSignatureError,
    InvalidTokenError,
    PyJWKClientError,
)

from tunebase.errors import ApiError, ApiErrorCode

logger = logging.getLogger(__name__)

# Clock skew allowance in seconds
CLOCK_SKEW_SECONDS = 60

# Supabase cloud signs with RS256, Supabase local (newer versions) with ES256
SESSION_TOKEN_ALGORITHMS = ["RS256", "ES256"]


class TokenVerifier(Protocol):
    """Protocol for token verification.

    Implementations must verify JWT tokens and return decoded claims.
    """

    def verify(self, token: str) -> dict[str, Any]:
        """Verify token and return decoded claims.

        Raises:
            ApiError(E_UNAUTHENTICATED): Token is invalid, expired, or malformed.
            ApiError(E_AUTH_UNAVAILABLE): Infrastructure failure (JWKS unreachable).
        """
        ...


def _unauthenticated(reason: str, message: str, **extra: Any) -> ApiError:
    logger.warning("auth_failure", extra={"reason": reason, **extra})
    return ApiError(ApiErrorCode.E_UNAUTHENTICATED, message)


def decode_session_token(
    token: str,
    key: Any,
    *,
    issuer: str,
    audiences: list[str],
    algorithms: list[str] = SESSION_TOKEN_ALGORITHMS,
) -> dict[str, Any]:
    """Decode a session JWT and validate the claims every verifier relies on.

    Validates:
    - signature with the given key
    - exp with +/-60s clock skew
    - iss matches issuer, aud is in audiences
    - sub is present and a valid UUID

    Raises:
        ApiError(E_UNAUTHENTICATED): On any validation failure.
    """
    try:
        payload = jwt.decode(
            token,
            key,
            algorithms=algorithms,
            audience=audiences,
            issuer=issuer,
            leeway=CLOCK_SKEW_SECONDS,
            options={
                "require": ["exp", "iss", "sub"],
                "verify_aud": True,
            },
        )
    except ExpiredSignatureError as e:
        raise _unauthenticated("expired_token", "Token expired") from e
    except InvalidSignatureError as e:
        raise _unauthenticated("invalid_signature", "Invalid token signature") from e
    except InvalidIssuerError as e:
        raise _unauthenticated("invalid_issuer", "Invalid token issuer") from e
    except InvalidAudienceError as e:
        raise _unauthenticated("invalid_audience", "Invalid token audience") from e
    except DecodeError as e:
        raise _unauthenticated("decode_error", "Invalid token format", error=str(e)) from e
    except InvalidTokenError as e:
        raise _unauthenticated("invalid_token", "Invalid token", error=str(e)) from e

    sub = payload.get("sub")
    if not sub:
        raise _unauthenticated("missing_sub", "Invalid token: missing sub")

    try:
        UUID(sub)
    except (ValueError, TypeError) as e:
        raise _unauthenticated("invalid_sub", "Invalid token: sub is not a valid UUID") from e

    return payload


class SupabaseJwksVerifier:
    """Production token verifier using Supabase JWKS.

    Signing keys are fetched from the JWKS endpoint and cached; a token whose
    kid is unknown triggers one forced refresh before it is rejected.
    """

    def __init__(
        self,
        jwks_url: str,
        issuer: str,
        audiences: list[str],
        cache_ttl: int = 3600,  # 1 hour
    ):
        """Initialize the Supabase JWKS verifier.

        Args:
            jwks_url: Full URL to the JWKS endpoint.
            issuer: Expected issuer (trailing slash will be stripped).
            audiences: List of allowed audience values.
            cache_ttl: How long to cache JWKS keys in seconds.
        """
        self.jwks_url = jwks_url
        self.issuer = issuer.rstrip("/")
        self.audiences = audiences
        self.cache_ttl = cache_ttl

        self._jwks_client: PyJWKClient | None = None
        self._jwks_lock = threading.Lock()

    def _new_jwks_client(self) -> PyJWKClient:
        return PyJWKClient(self.jwks_url, cache_keys=True, lifespan=self.cache_ttl)

    def _get_jwks_client(self, *, refresh: bool = False) -> PyJWKClient:
        """Get the JWKS client, replacing it when a refresh is forced."""
        with self._jwks_lock:
            if self._jwks_client is None or refresh:
                self._jwks_client = self._new_jwks_client()
            return self._jwks_client

    def verify(self, token: str) -> dict[str, Any]:
        """Verify a Supabase session JWT.

        Raises:
            ApiError(E_UNAUTHENTICATED): Token is invalid.
            ApiError(E_AUTH_UNAVAILABLE): JWKS fetch failed.
        """
        try:
            signing_key = self._get_signing_key(token)
        except PyJWKClientError as e:
            logger.warning("auth_failure", extra={"reason": "jwks_unavailable", "error": str(e)})
            raise ApiError(
                ApiErrorCode.E_AUTH_UNAVAILABLE,
                "Authentication service unavailable",
            ) from e

        return decode_session_token(
            token,
            signing_key.key,
            issuer=self.issuer,
            audiences=self.audiences,
        )

    def _get_signing_key(self, token: str) -> Any:
        """Get the signing key for the token, refreshing JWKS once on kid miss.

        Raises:
            PyJWKClientError: If JWKS fetch fails.
            ApiError(E_UNAUTHENTICATED): If kid not found after refresh.
        """
        try:
            return self._get_jwks_client().get_signing_key_from_jwt(token)
        except DecodeError as e:
            raise _unauthenticated("decode_error", "Invalid token format", error=str(e)) from e
        except PyJWKClientError as e:
            if "Unable to find" not in str(e) and "kid" not in str(e).lower():
                raise

        logger.info("Refreshing JWKS due to kid miss")
        try:
            return self._get_jwks_client(refresh=True).get_signing_key_from_jwt(token)
        except PyJWKClientError as e:
            raise _unauthenticated("kid_not_found", "Invalid token: signing key not found") from e
