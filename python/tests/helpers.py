"""Test helpers for authentication and common test operations.

Provides:
- Token minting for test authentication
- Header generation for test requests
- User id helpers
"""

import time
from uuid import UUID, uuid4

import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from tests.support.test_verifier import MockJwtVerifier

# Default test token settings
DEFAULT_ISSUER = "test-issuer"
DEFAULT_AUDIENCE = "test-audience"
DEFAULT_EXPIRES_IN = 3600  # 1 hour


def _claims(user_id: UUID | str, expires_in: int, issuer: str, audience: str, **extra) -> dict:
    now = int(time.time())
    return {
        "sub": str(user_id),
        "iss": issuer,
        "aud": audience,
        "iat": now,
        "exp": now + expires_in,
        **extra,
    }


def mint_test_token(
    user_id: UUID | str,
    expires_in: int = DEFAULT_EXPIRES_IN,
    issuer: str = DEFAULT_ISSUER,
    audience: str = DEFAULT_AUDIENCE,
    **extra_claims,
) -> str:
    """Mint a valid test JWT token signed with the MockJwtVerifier key."""
    payload = _claims(user_id, expires_in, issuer, audience, **extra_claims)
    return jwt.encode(payload, MockJwtVerifier.get_private_key(), algorithm="RS256")


def mint_expired_token(user_id: UUID | str) -> str:
    """Mint a token that expired 1 hour ago."""
    return mint_test_token(user_id, expires_in=-3600)


def mint_token_with_bad_signature(user_id: UUID | str) -> str:
    """Mint a token signed with a key the verifier does not know."""
    other_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    key_bytes = other_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    payload = _claims(user_id, DEFAULT_EXPIRES_IN, DEFAULT_ISSUER, DEFAULT_AUDIENCE)
    return jwt.encode(payload, key_bytes, algorithm="RS256")


def auth_headers(user_id: UUID | str, **token_kwargs) -> dict[str, str]:
    """Return headers dict with valid Authorization for the given user."""
    token = mint_test_token(user_id, **token_kwargs)
    return {"Authorization": f"Bearer {token}"}


def create_test_user_id() -> UUID:
    """Generate a random UUID for a test user."""
    return uuid4()
