"""FastAPI dependencies for route handlers.

Common dependencies like database sessions and the external service clients.
"""

from fastapi import Request

from tunebase.auth.identity import IdentityClientBase
from tunebase.db.session import get_db, get_session_factory
from tunebase.storage import StorageClientBase

__all__ = ["get_db", "get_identity_client", "get_session_factory", "get_storage_client"]


def get_storage_client(request: Request) -> StorageClientBase:
    """Get the shared object storage client from app state.

    The client is created at app startup (see app.lifespan); tests replace
    app.state.storage with a FakeStorageClient.
    """
    return request.app.state.storage


def get_identity_client(request: Request) -> IdentityClientBase:
    """Get the shared identity provider client from app state."""
    return request.app.state.identity
