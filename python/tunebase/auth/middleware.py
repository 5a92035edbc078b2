"""Authentication middleware for FastAPI.

Provides:
- AuthMiddleware: Global middleware for bearer token verification
- get_viewer: Dependency for accessing authenticated viewer identity
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from tunebase.auth.verifier import TokenVerifier
from tunebase.db.models import UserRole
from tunebase.errors import ApiError, ApiErrorCode
from tunebase.responses import error_response

logger = logging.getLogger(__name__)

AUTHORIZATION_HEADER = "authorization"

# Paths that don't require authentication
PUBLIC_PATHS = {
    "/health",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/api/auth/signup",
    "/api/auth/login",
}

# (method, path) pairs that are public only for that method
PUBLIC_ROUTES = {("GET", "/api/songs")}

# Bootstrap receives the user id and verified claims, returns the stored role
BootstrapCallback = Callable[[UUID, dict[str, Any]], str]


@dataclass
class Viewer:
    """Authenticated viewer identity.

    Attributes:
        user_id: The viewer's user ID (from JWT sub claim).
        role: The role stored on the viewer's profile ("user" or "admin").
    """

    user_id: UUID
    role: str = UserRole.user.value

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin.value


def is_public_request(method: str, path: str) -> bool:
    """Whether a request may proceed without a bearer token."""
    return path in PUBLIC_PATHS or (method.upper(), path) in PUBLIC_ROUTES


class AuthMiddleware(BaseHTTPMiddleware):
    """Authentication middleware for FastAPI.

    Order of checks:
    1. Skip if public path
    2. Extract and parse bearer token
    3. Verify token via TokenVerifier
    4. Call bootstrap callback to ensure the profile exists and read its role
    5. Attach Viewer to request state
    """

    def __init__(
        self,
        app: ASGIApp,
        verifier: TokenVerifier,
        bootstrap_callback: BootstrapCallback | None = None,
    ):
        """Initialize the auth middleware.

        Args:
            app: The ASGI application.
            verifier: TokenVerifier implementation for JWT verification.
            bootstrap_callback: Function(user_id, claims) -> role.
                              Called after successful auth to ensure the profile exists.
        """
        super().__init__(app)
        self.verifier = verifier
        self.bootstrap_callback = bootstrap_callback

    async def dispatch(self, request: Request, call_next) -> JSONResponse:
        """Process the request through auth checks."""
        if is_public_request(request.method, request.url.path):
            return await call_next(request)

        token, error_response_obj = self._extract_bearer_token(request)
        if error_response_obj:
            return error_response_obj

        try:
            payload = self.verifier.verify(token)
        except ApiError as e:
            return self._error_json_response(e.code, e.message, e.status_code)

        user_id = UUID(payload["sub"])

        if self.bootstrap_callback:
            try:
                role = self.bootstrap_callback(user_id, payload)
            except Exception as e:
                logger.exception("Bootstrap failed for user %s: %s", user_id, e)
                return self._error_json_response(
                    ApiErrorCode.E_INTERNAL,
                    "Internal server error",
                    500,
                )
        else:
            # Without a profile store every caller is a plain user
            role = UserRole.user.value

        request.state.viewer = Viewer(user_id=user_id, role=role)
        request.state.access_token = token

        return await call_next(request)

    def _extract_bearer_token(self, request: Request) -> tuple[str, JSONResponse | None]:
        """Extract bearer token from Authorization header.

        Returns:
            Tuple of (token, error_response). Token is empty string if error.
        """
        auth_header = request.headers.get(AUTHORIZATION_HEADER)

        if not auth_header:
            logger.warning(
                "auth_failure",
                extra={"reason": "missing_header", "request_path": request.url.path},
            )
            return "", self._error_json_response(
                ApiErrorCode.E_UNAUTHENTICATED,
                "Authentication required",
                401,
            )

        scheme, _, token = auth_header.partition(" ")
        token = token.strip()
        if scheme.lower() != "bearer" or not token:
            logger.warning(
                "auth_failure",
                extra={"reason": "invalid_header_format", "request_path": request.url.path},
            )
            return "", self._error_json_response(
                ApiErrorCode.E_UNAUTHENTICATED,
                "Invalid authorization header format",
                401,
            )

        return token, None

    def _error_json_response(
        self, code: ApiErrorCode, message: str, status_code: int
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status_code,
            content=error_response(code, message),
        )


def get_viewer(request: Request) -> Viewer:
    """FastAPI dependency to get the authenticated viewer.

    Raises:
        ApiError: If viewer is not set (middleware didn't run or path is public).
    """
    viewer = getattr(request.state, "viewer", None)
    if viewer is None:
        raise ApiError(ApiErrorCode.E_UNAUTHENTICATED, "Authentication required")
    return viewer


def get_access_token(request: Request) -> str:
    """FastAPI dependency returning the bearer token the viewer authenticated with."""
    token = getattr(request.state, "access_token", None)
    if not token:
        raise ApiError(ApiErrorCode.E_UNAUTHENTICATED, "Authentication required")
    return token
