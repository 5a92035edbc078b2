"""Identity provider client (Supabase Auth / GoTrue).

Sign-up, sign-in and sign-out happen against the hosted identity service;
this API only relays the calls and keeps the local profile table in step.
Token verification lives in auth.verifier and never goes through here.
"""

import logging
import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass
from uuid import UUID, uuid4

import httpx

from tunebase.config import get_settings

logger = logging.getLogger(__name__)

IDENTITY_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class IdentitySession:
    """Session issued by the identity provider.

    access_token is None when sign-up succeeded but the provider requires
    email confirmation before issuing a session.
    """

    user_id: UUID
    email: str
    access_token: str | None = None
    refresh_token: str | None = None
    token_type: str = "bearer"
    expires_in: int | None = None


class IdentityError(Exception):
    """Identity provider error.

    code is one of:
    - "invalid_credentials": wrong email/password
    - "already_registered": sign-up with an email that exists
    - "rejected": provider rejected the request (weak password, bad email)
    - "unavailable": provider unreachable or returned a server error
    """

    def __init__(self, message: str, code: str = "unavailable"):
        super().__init__(message)
        self.message = message
        self.code = code


class IdentityClientBase(ABC):
    """Abstract base class for identity provider clients."""

    @abstractmethod
    def sign_up(self, email: str, password: str, display_name: str | None = None) -> IdentitySession:
        """Register a new identity.

        Raises:
            IdentityError: On rejection or provider failure.
        """
        ...

    @abstractmethod
    def sign_in(self, email: str, password: str) -> IdentitySession:
        """Exchange email/password for a session.

        Raises:
            IdentityError: code "invalid_credentials" on bad credentials.
        """
        ...

    @abstractmethod
    def sign_out(self, access_token: str) -> None:
        """Revoke the session bound to access_token."""
        ...


class SupabaseIdentityClient(IdentityClientBase):
    """Production client for the Supabase Auth REST API."""

    def __init__(self, supabase_url: str, anon_key: str):
        self._auth_url = f"{supabase_url.rstrip('/')}/auth/v1"
        self._headers = {"apikey": anon_key, "Content-Type": "application/json"}

    def _post(self, path: str, payload: dict | None = None, *, bearer: str | None = None):
        headers = dict(self._headers)
        if bearer:
            headers["Authorization"] = f"Bearer {bearer}"
        try:
            with httpx.Client(timeout=IDENTITY_TIMEOUT_SECONDS) as client:
                return client.post(f"{self._auth_url}{path}", headers=headers, json=payload)
        except httpx.HTTPError as e:
            raise IdentityError(f"Identity provider unreachable: {e}") from e

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        return body.get("msg") or body.get("error_description") or body.get("message") or str(body)

    @staticmethod
    def _session_from(body: dict, email: str) -> IdentitySession:
        # Sign-in returns {access_token, user: {...}}; sign-up without a
        # session returns the bare user object.
        user = body.get("user") or body
        return IdentitySession(
            user_id=UUID(user["id"]),
            email=user.get("email") or email,
            access_token=body.get("access_token"),
            refresh_token=body.get("refresh_token"),
            token_type=body.get("token_type") or "bearer",
            expires_in=body.get("expires_in"),
        )

    def sign_up(self, email: str, password: str, display_name: str | None = None) -> IdentitySession:
        payload: dict = {"email": email, "password": password}
        if display_name:
            payload["data"] = {"display_name": display_name}

        response = self._post("/signup", payload)
        if response.status_code >= 500:
            raise IdentityError(f"Sign-up failed: {response.status_code}")
        if response.status_code >= 400:
            message = self._error_message(response)
            code = "already_registered" if "registered" in message.lower() else "rejected"
            raise IdentityError(message, code=code)

        return self._session_from(response.json(), email)

    def sign_in(self, email: str, password: str) -> IdentitySession:
        response = self._post(
            "/token?grant_type=password", {"email": email, "password": password}
        )
        if response.status_code >= 500:
            raise IdentityError(f"Sign-in failed: {response.status_code}")
        if response.status_code >= 400:
            raise IdentityError(self._error_message(response), code="invalid_credentials")

        return self._session_from(response.json(), email)

    def sign_out(self, access_token: str) -> None:
        response = self._post("/logout", bearer=access_token)
        # 401/404 mean the session is already gone
        if response.status_code >= 500:
            raise IdentityError(f"Sign-out failed: {response.status_code}")


class FakeIdentityClient(IdentityClientBase):
    """In-memory identity provider for local development and tests.

    Issued access tokens are opaque random strings; tests that need a
    verifiable JWT mint one separately.
    """

    def __init__(self):
        self._users: dict[str, tuple[UUID, str]] = {}
        self._sessions: dict[str, UUID] = {}
        self._unavailable = False

    def sign_up(self, email: str, password: str, display_name: str | None = None) -> IdentitySession:
        self._check_available()
        key = email.strip().lower()
        if key in self._users:
            raise IdentityError("User already registered", code="already_registered")
        if len(password) < 6:
            raise IdentityError("Password should be at least 6 characters", code="rejected")
        user_id = uuid4()
        self._users[key] = (user_id, password)
        return self._issue(user_id, email)

    def sign_in(self, email: str, password: str) -> IdentitySession:
        self._check_available()
        entry = self._users.get(email.strip().lower())
        if entry is None or entry[1] != password:
            raise IdentityError("Invalid login credentials", code="invalid_credentials")
        return self._issue(entry[0], email)

    def sign_out(self, access_token: str) -> None:
        self._check_available()
        self._sessions.pop(access_token, None)

    def _issue(self, user_id: UUID, email: str) -> IdentitySession:
        token = secrets.token_urlsafe(24)
        self._sessions[token] = user_id
        return IdentitySession(
            user_id=user_id,
            email=email,
            access_token=token,
            refresh_token=secrets.token_urlsafe(24),
            expires_in=3600,
        )

    def _check_available(self) -> None:
        if self._unavailable:
            raise IdentityError("Simulated identity provider outage")

    # Test helper methods

    def set_unavailable(self, unavailable: bool = True) -> None:
        """Make every call raise IdentityError("unavailable") (test helper)."""
        self._unavailable = unavailable

    def active_sessions(self) -> int:
        """Number of sessions not yet signed out (test helper)."""
        return len(self._sessions)


def get_identity_client() -> IdentityClientBase:
    """Get the configured identity client.

    Returns:
        SupabaseIdentityClient if SUPABASE_URL and SUPABASE_ANON_KEY are set,
        FakeIdentityClient otherwise.
    """
    settings = get_settings()

    if settings.identity_configured:
        return SupabaseIdentityClient(
            supabase_url=settings.supabase_url,  # type: ignore[arg-type]
            anon_key=settings.supabase_anon_key,  # type: ignore[arg-type]
        )

    logger.warning("Supabase Auth not configured; using in-memory identity provider")
    return FakeIdentityClient()
