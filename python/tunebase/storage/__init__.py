"""Storage module for Supabase Storage operations.

Provides:
- StorageClient for interacting with Supabase Storage
- Object path utilities for consistent naming
- Test isolation support via configurable prefixes
"""

from tunebase.storage.client import (
    FakeStorageClient,
    StorageClient,
    StorageClientBase,
    StorageError,
    StoredObject,
    get_storage_client,
)
from tunebase.storage.paths import (
    build_object_path,
    object_path_from_public_url,
    sanitize_filename,
)

__all__ = [
    "StorageClient",
    "StorageClientBase",
    "FakeStorageClient",
    "StorageError",
    "StoredObject",
    "get_storage_client",
    "build_object_path",
    "object_path_from_public_url",
    "sanitize_filename",
]
