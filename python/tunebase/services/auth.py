"""Sign-up, sign-in and sign-out.

The identity provider owns credentials and sessions. This layer relays the
calls and makes sure a profile row exists for every identity it hands a
session to.
"""

import logging

from sqlalchemy.orm import Session

from tunebase.auth.identity import IdentityClientBase, IdentityError, IdentitySession
from tunebase.errors import ApiError, ApiErrorCode
from tunebase.schemas.auth import SessionOut
from tunebase.services.bootstrap import ensure_user_profile

logger = logging.getLogger(__name__)

IDENTITY_ERROR_CODES = {
    "invalid_credentials": (ApiErrorCode.E_INVALID_CREDENTIALS, "Invalid email or password"),
    "already_registered": (ApiErrorCode.E_IDENTITY_EXISTS, "Email is already registered"),
    "rejected": (ApiErrorCode.E_INVALID_REQUEST, None),
    "unavailable": (ApiErrorCode.E_AUTH_UNAVAILABLE, "Authentication service unavailable"),
}


def _to_api_error(e: IdentityError) -> ApiError:
    code, message = IDENTITY_ERROR_CODES.get(e.code, IDENTITY_ERROR_CODES["unavailable"])
    return ApiError(code, message or e.message)


def _session_out(session: IdentitySession) -> SessionOut:
    return SessionOut(
        user_id=session.user_id,
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        token_type=session.token_type,
        expires_in=session.expires_in,
    )


def sign_up(
    db: Session,
    identity: IdentityClientBase,
    email: str,
    password: str,
    display_name: str | None = None,
) -> SessionOut:
    """Register a new identity and create its profile with the "user" role."""
    display_name = (display_name or "").strip() or None
    try:
        session = identity.sign_up(email.strip(), password, display_name)
    except IdentityError as e:
        logger.info("Sign-up rejected: %s", e.code)
        raise _to_api_error(e) from e

    ensure_user_profile(db, session.user_id, display_name)
    logger.info("Signed up user %s", session.user_id)
    return _session_out(session)


def sign_in(db: Session, identity: IdentityClientBase, email: str, password: str) -> SessionOut:
    """Exchange credentials for a session.

    Raises:
        ApiError(E_INVALID_CREDENTIALS): Wrong email or password.
    """
    try:
        session = identity.sign_in(email.strip(), password)
    except IdentityError as e:
        logger.info("Sign-in rejected: %s", e.code)
        raise _to_api_error(e) from e

    ensure_user_profile(db, session.user_id)
    return _session_out(session)


def sign_out(identity: IdentityClientBase, access_token: str) -> None:
    """Revoke the caller's session at the identity provider."""
    try:
        identity.sign_out(access_token)
    except IdentityError as e:
        raise _to_api_error(e) from e
