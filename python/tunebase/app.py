"""FastAPI application creation and configuration.

This module creates and configures the FastAPI application instance.
It registers exception handlers, auth middleware, CORS, request-id
middleware, and routes.

Token Verification:
- All environments (local, test, staging, prod) use SupabaseJwksVerifier
- Only the configuration values (JWKS URL, issuer, audiences) change

Middleware Ordering (Critical):
- Middleware runs in reverse order of registration
- RequestIDMiddleware is added LAST so it runs FIRST (outermost)
- CORSMiddleware sits outside AuthMiddleware so preflight requests never
  need a bearer token

Actual execution order per request:
1. RequestIDMiddleware (sets request_id, starts timer)
2. CORSMiddleware (answers preflight, adds CORS headers)
3. AuthMiddleware (verifies auth, bootstraps profile, sets viewer)
4. Route handler

External clients:
- The storage and identity clients are created once at startup and kept on
  app.state; routes reach them through api.deps.
"""

import json
from contextlib import asynccontextmanager
from typing import Any
from uuid import UUID

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tunebase.api.routes import create_api_router
from tunebase.auth.identity import get_identity_client
from tunebase.auth.middleware import AuthMiddleware
from tunebase.auth.verifier import SupabaseJwksVerifier
from tunebase.config import get_settings
from tunebase.db.session import get_session_factory
from tunebase.errors import ApiError, ApiErrorCode
from tunebase.logging import configure_logging, get_logger
from tunebase.middleware.request_id import RequestIDMiddleware
from tunebase.responses import (
    api_error_handler,
    error_response,
    http_exception_handler,
    unhandled_exception_handler,
)
from tunebase.services.bootstrap import ensure_user_profile
from tunebase.storage import get_storage_client

# Configure structured logging at import time
configure_logging()

logger = get_logger(__name__)


def create_bootstrap_callback(session_factory=None):
    """Create a bootstrap callback that creates its own database session.

    The callback is called by the auth middleware for each authenticated
    request. It ensures the viewer's profile exists and returns its role.

    Args:
        session_factory: Session factory to use; defaults to the app-wide one.
    """
    if session_factory is None:
        session_factory = get_session_factory()

    def bootstrap(user_id: UUID, claims: dict[str, Any]) -> str:
        metadata = claims.get("user_metadata")
        display_name = metadata.get("display_name") if isinstance(metadata, dict) else None
        if not isinstance(display_name, str):
            display_name = None
        db = session_factory()
        try:
            return ensure_user_profile(db, user_id, display_name)
        finally:
            db.close()

    return bootstrap


def create_token_verifier():
    """Create the token verifier using Supabase JWKS.

    Returns:
        SupabaseJwksVerifier configured with settings from environment.
    """
    settings = get_settings()

    return SupabaseJwksVerifier(
        jwks_url=settings.supabase_jwks_url,  # type: ignore
        issuer=settings.normalized_issuer,  # type: ignore
        audiences=settings.audience_list,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the external service clients unless a test already set them."""
    if getattr(app.state, "storage", None) is None:
        app.state.storage = get_storage_client()
    if getattr(app.state, "identity", None) is None:
        app.state.identity = get_identity_client()

    logger.info(
        "clients_initialized",
        storage=type(app.state.storage).__name__,
        identity=type(app.state.identity).__name__,
    )

    yield


def create_app(
    skip_auth_middleware: bool = False,
    token_verifier=None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        skip_auth_middleware: If True, skip adding auth middleware (for testing).
        token_verifier: Optional custom token verifier (for testing).

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="Tunebase API",
        description="Backend API for Tunebase - upload, browse, playlist and favorite music",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.storage = None
    app.state.identity = None

    # Register exception handlers
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Missing or malformed fields are a 400, not FastAPI's default 422."""
        fields = sorted({str(err["loc"][-1]) for err in exc.errors() if err.get("loc")})
        message = f"Invalid request: {', '.join(fields)}" if fields else "Invalid request body"
        return JSONResponse(
            status_code=400,
            content=error_response(ApiErrorCode.E_INVALID_REQUEST, message),
        )

    @app.middleware("http")
    async def catch_json_decode_errors(request: Request, call_next):
        """Reject malformed JSON bodies before they reach route handlers."""
        if request.method in ("POST", "PUT", "PATCH"):
            content_type = request.headers.get("content-type", "")
            if "application/json" in content_type:
                body = await request.body()
                if body:
                    try:
                        json.loads(body)
                    except json.JSONDecodeError:
                        return JSONResponse(
                            status_code=400,
                            content=error_response(
                                ApiErrorCode.E_INVALID_REQUEST, "Malformed JSON body"
                            ),
                        )
        return await call_next(request)

    app.include_router(create_api_router())

    if not skip_auth_middleware:
        verifier = token_verifier or create_token_verifier()

        app.add_middleware(
            AuthMiddleware,
            verifier=verifier,
            bootstrap_callback=create_bootstrap_callback(),
        )

        logger.info("auth_middleware_enabled", env=settings.tunebase_env.value)

    cors_origins = settings.cors_origin_list
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
        logger.info("cors_middleware_enabled", origins=cors_origins)

    return app


def add_request_id_middleware(app: FastAPI, log_requests: bool = True) -> None:
    """Add request-id middleware to the app.

    This should be called AFTER all other middleware is added, so it runs FIRST.
    This ensures every response includes X-Request-ID, including auth failures.

    Args:
        app: The FastAPI application.
        log_requests: Whether to log access entries for each request.
    """
    app.add_middleware(RequestIDMiddleware, log_requests=log_requests)
    logger.info("request_id_middleware_enabled")
