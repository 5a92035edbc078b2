"""Unit tests for token verifiers.

Tests the SupabaseJwksVerifier (JWKS client mocked, no HTTP) and the shared
claim validation in decode_session_token.
"""

import time
from unittest.mock import MagicMock, patch
from uuid import uuid4

import jwt
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jwt.exceptions import PyJWKClientError

from tunebase.auth.verifier import SupabaseJwksVerifier, decode_session_token
from tunebase.errors import ApiError, ApiErrorCode

ISSUER = "https://test.supabase.co/auth/v1"


@pytest.fixture(scope="module")
def rsa_keypair():
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return private_key, private_key.public_key()


def mint_token(private_key, sub: str, /, **overrides) -> str:
    now = int(time.time())
    payload = {
        "sub": sub,
        "iss": ISSUER,
        "aud": "authenticated",
        "iat": now,
        "exp": now + 3600,
        **overrides,
    }
    private_bytes = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return jwt.encode(payload, private_bytes, algorithm="RS256", headers={"kid": "test-key-id"})


def jwks_client_returning(public_key) -> MagicMock:
    client = MagicMock()
    client.get_signing_key_from_jwt.return_value = MagicMock(key=public_key)
    return client


class TestDecodeSessionToken:
    """Claim validation shared by every verifier."""

    def decode(self, token, public_key):
        return decode_session_token(token, public_key, issuer=ISSUER, audiences=["authenticated"])

    def test_valid_token(self, rsa_keypair):
        private_key, public_key = rsa_keypair
        user_id = str(uuid4())

        claims = self.decode(mint_token(private_key, user_id), public_key)

        assert claims["sub"] == user_id

    @pytest.mark.parametrize(
        "overrides,fragment",
        [
            ({"exp": int(time.time()) - 120}, "expired"),
            ({"iss": "https://evil.example"}, "issuer"),
            ({"aud": "someone-else"}, "audience"),
            ({"sub": "not-a-uuid"}, "uuid"),
        ],
    )
    def test_invalid_claims_rejected(self, rsa_keypair, overrides, fragment):
        private_key, public_key = rsa_keypair

        with pytest.raises(ApiError) as exc_info:
            self.decode(mint_token(private_key, str(uuid4()), **overrides), public_key)

        assert exc_info.value.code == ApiErrorCode.E_UNAUTHENTICATED
        assert fragment in exc_info.value.message.lower()

    def test_clock_skew_accepted(self, rsa_keypair):
        private_key, public_key = rsa_keypair
        token = mint_token(private_key, str(uuid4()), exp=int(time.time()) - 30)

        assert self.decode(token, public_key)["exp"]

    def test_wrong_key_rejected(self, rsa_keypair):
        _, public_key = rsa_keypair
        other = rsa.generate_private_key(public_exponent=65537, key_size=2048)

        with pytest.raises(ApiError, match="signature"):
            self.decode(mint_token(other, str(uuid4())), public_key)

    def test_garbage_rejected(self, rsa_keypair):
        with pytest.raises(ApiError) as exc_info:
            self.decode("not.a.jwt", rsa_keypair[1])

        assert exc_info.value.code == ApiErrorCode.E_UNAUTHENTICATED


class TestSupabaseJwksVerifier:
    """Unit tests for SupabaseJwksVerifier; the JWKS client is always mocked."""

    @pytest.fixture
    def verifier(self):
        return SupabaseJwksVerifier(
            jwks_url="https://test.supabase.co/auth/v1/.well-known/jwks.json",
            issuer=ISSUER + "/",
            audiences=["authenticated"],
        )

    def test_issuer_trailing_slash_stripped(self, verifier):
        assert verifier.issuer == ISSUER

    def test_valid_token(self, verifier, rsa_keypair):
        private_key, public_key = rsa_keypair
        user_id = str(uuid4())

        with patch.object(verifier, "_new_jwks_client", return_value=jwks_client_returning(public_key)):
            claims = verifier.verify(mint_token(private_key, user_id))

        assert claims["sub"] == user_id

    def test_kid_miss_triggers_single_refresh(self, verifier, rsa_keypair):
        private_key, public_key = rsa_keypair
        stale = MagicMock()
        stale.get_signing_key_from_jwt.side_effect = PyJWKClientError(
            'Unable to find a signing key that matches: "test-key-id"'
        )
        fresh = jwks_client_returning(public_key)

        with patch.object(verifier, "_new_jwks_client", side_effect=[stale, fresh]) as factory:
            claims = verifier.verify(mint_token(private_key, str(uuid4())))

        assert factory.call_count == 2
        assert claims["aud"] == "authenticated"

    def test_kid_not_found_after_refresh(self, verifier, rsa_keypair):
        private_key, _ = rsa_keypair
        missing = MagicMock()
        missing.get_signing_key_from_jwt.side_effect = PyJWKClientError(
            'Unable to find a signing key that matches: "test-key-id"'
        )

        with patch.object(verifier, "_new_jwks_client", return_value=missing):
            with pytest.raises(ApiError) as exc_info:
                verifier.verify(mint_token(private_key, str(uuid4())))

        assert exc_info.value.code == ApiErrorCode.E_UNAUTHENTICATED

    def test_jwks_fetch_failure_is_unavailable(self, verifier, rsa_keypair):
        private_key, _ = rsa_keypair
        unreachable = MagicMock()
        unreachable.get_signing_key_from_jwt.side_effect = PyJWKClientError(
            "Fail to fetch data from the url, err: timed out"
        )

        with patch.object(verifier, "_new_jwks_client", return_value=unreachable):
            with pytest.raises(ApiError) as exc_info:
                verifier.verify(mint_token(private_key, str(uuid4())))

        assert exc_info.value.code == ApiErrorCode.E_AUTH_UNAVAILABLE
        assert exc_info.value.status_code == 503
