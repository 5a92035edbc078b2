"""Pytest configuration and fixtures for Tunebase tests.

Test isolation strategy:
- Every test gets its own in-memory SQLite database (see tests/utils/db.py)
- Storage and identity are the in-memory fakes, reachable through fixtures
  so tests can inspect them and inject failures
- Authenticated tests use auth_client with tokens minted by tests.helpers
"""

import os
import sys
from collections.abc import Generator
from pathlib import Path

# Settings are read when the app is created; provide test defaults first
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("TUNEBASE_ENV", "test")
os.environ.setdefault("SUPABASE_JWKS_URL", "http://localhost:54321/auth/v1/.well-known/jwks.json")
os.environ.setdefault("SUPABASE_ISSUER", "test-issuer")
os.environ.setdefault("SUPABASE_AUDIENCES", "test-audience")

# Add repo root to sys.path for importing top-level packages (e.g., apps)
_repo_root = Path(__file__).parent.parent.parent
if str(_repo_root) not in sys.path:
    sys.path.insert(0, str(_repo_root))

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker

from tunebase.app import add_request_id_middleware, create_app, create_bootstrap_callback
from tunebase.auth.identity import FakeIdentityClient
from tunebase.auth.middleware import AuthMiddleware
from tunebase.config import clear_settings_cache
from tunebase.db.session import create_session_factory, get_db
from tunebase.storage import FakeStorageClient
from tests.support.test_verifier import MockJwtVerifier
from tests.utils.db import create_test_engine


@pytest.fixture(autouse=True)
def _fresh_settings() -> Generator[None, None, None]:
    """Reload settings per test so monkeypatched env vars take effect."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """A private in-memory database with the full schema."""
    engine = create_test_engine()
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return create_session_factory(engine)


@pytest.fixture
def db_session(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    """A session for arranging and asserting on data.

    Call db_session.expire_all() before re-reading rows a request changed.
    """
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def storage() -> FakeStorageClient:
    return FakeStorageClient()


@pytest.fixture
def identity() -> FakeIdentityClient:
    return FakeIdentityClient()


def _wire_app(
    app: FastAPI,
    session_factory: sessionmaker[Session],
    storage: FakeStorageClient,
    identity: FakeIdentityClient,
) -> FastAPI:
    def override_get_db() -> Generator[Session, None, None]:
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.state.storage = storage
    app.state.identity = identity
    return app


@pytest.fixture
def client(session_factory, storage, identity) -> Generator[TestClient, None, None]:
    """Provide a FastAPI test client without authentication.

    This client does not have auth middleware, suitable for testing
    public endpoints and basic functionality.
    """
    app = _wire_app(create_app(skip_auth_middleware=True), session_factory, storage, identity)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def authenticated_app(session_factory, storage, identity) -> FastAPI:
    """Provide a FastAPI app with auth middleware using the test verifier.

    The profile bootstrap runs against the test database.
    """
    app = _wire_app(create_app(skip_auth_middleware=True), session_factory, storage, identity)

    app.add_middleware(
        AuthMiddleware,
        verifier=MockJwtVerifier(),
        bootstrap_callback=create_bootstrap_callback(session_factory),
    )
    # Request-id middleware LAST so it runs FIRST (outermost)
    add_request_id_middleware(app, log_requests=False)

    return app


@pytest.fixture
def auth_client(authenticated_app: FastAPI) -> Generator[TestClient, None, None]:
    """Provide a FastAPI test client with auth middleware.

    Use tests.helpers.auth_headers() to generate valid tokens for requests.
    """
    with TestClient(authenticated_app, raise_server_exceptions=False) as client:
        yield client
