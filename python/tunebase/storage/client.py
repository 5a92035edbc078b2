"""Supabase Storage client abstraction.

Provides a small interface over the Storage REST API:
- Object upload (server-side, service role key)
- Public URL resolution
- Object deletion

Songs and covers live in separate buckets, so every method takes the bucket
name explicitly. All methods receive the full object path directly - prefix
handling happens only in storage.paths.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

import httpx

from tunebase.config import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredObject:
    """Result of a successful upload."""

    bucket: str
    path: str
    public_url: str


class StorageError(Exception):
    """Storage operation error."""

    def __init__(self, message: str, code: str = "E_STORAGE_ERROR"):
        super().__init__(message)
        self.message = message
        self.code = code


class StorageClientBase(ABC):
    """Abstract base class for storage client implementations."""

    @abstractmethod
    def upload_object(
        self,
        bucket: str,
        path: str,
        content: bytes,
        *,
        content_type: str,
    ) -> StoredObject:
        """Store an object.

        Args:
            bucket: Bucket name (e.g. "songs").
            path: Object path inside the bucket.
            content: Raw bytes.
            content_type: MIME type recorded with the object.

        Returns:
            StoredObject with the resolved public URL.

        Raises:
            StorageError: If the upload is rejected or the service is unreachable.
        """
        ...

    @abstractmethod
    def public_url(self, bucket: str, path: str) -> str:
        """Return the public URL of an object (no existence check)."""
        ...

    @abstractmethod
    def delete_object(self, bucket: str, path: str) -> None:
        """Delete an object.

        Deleting an object that does not exist is not an error.

        Raises:
            StorageError: If the service refuses or cannot be reached.
        """
        ...


class StorageClient(StorageClientBase):
    """Production Supabase Storage client.

    Uses httpx for HTTP operations against Supabase Storage API.
    """

    def __init__(self, supabase_url: str, service_key: str):
        """Initialize the storage client.

        Args:
            supabase_url: Supabase project URL (e.g., https://xxx.supabase.co).
            service_key: Supabase service role key.
        """
        self._base_url = supabase_url.rstrip("/")
        self._storage_url = f"{self._base_url}/storage/v1"
        self._headers = {
            "Authorization": f"Bearer {service_key}",
            "apikey": service_key,
        }

    def upload_object(
        self,
        bucket: str,
        path: str,
        content: bytes,
        *,
        content_type: str,
    ) -> StoredObject:
        """Upload via POST /object/{bucket}/{path} (no upsert)."""
        url = f"{self._storage_url}/object/{bucket}/{path}"
        headers = {**self._headers, "Content-Type": content_type, "x-upsert": "false"}

        try:
            with httpx.Client() as client:
                response = client.post(url, headers=headers, content=content, timeout=60.0)
        except httpx.HTTPError as e:
            raise StorageError(f"Storage upload failed: {e}") from e

        if response.status_code not in (200, 201):
            raise StorageError(
                f"Storage upload failed: {response.status_code} {response.text}",
            )

        return StoredObject(bucket=bucket, path=path, public_url=self.public_url(bucket, path))

    def public_url(self, bucket: str, path: str) -> str:
        """Public buckets are served from /object/public/{bucket}/{path}."""
        return f"{self._storage_url}/object/public/{bucket}/{path}"

    def delete_object(self, bucket: str, path: str) -> None:
        """Delete via DELETE /object/{bucket}/{path}."""
        url = f"{self._storage_url}/object/{bucket}/{path}"

        try:
            with httpx.Client() as client:
                response = client.delete(url, headers=self._headers, timeout=30.0)
        except httpx.HTTPError as e:
            raise StorageError(f"Storage delete failed: {e}") from e

        if response.status_code not in (200, 204, 404):
            raise StorageError(
                f"Storage delete failed: {response.status_code} {response.text}",
            )


class FakeStorageClient(StorageClientBase):
    """Fake storage client for local development and tests.

    Stores objects in memory. Individual operations can be made to fail per
    bucket with fail_uploads_to() / fail_deletes_from().
    """

    BASE_URL = "https://fake-storage.test/storage/v1"

    def __init__(self):
        self._objects: dict[tuple[str, str], tuple[bytes, str]] = {}
        self._failing_uploads: set[str] = set()
        self._failing_deletes: set[str] = set()

    def upload_object(
        self,
        bucket: str,
        path: str,
        content: bytes,
        *,
        content_type: str,
    ) -> StoredObject:
        """Store the object in memory."""
        if bucket in self._failing_uploads:
            raise StorageError(f"Simulated upload failure for bucket {bucket}")
        if (bucket, path) in self._objects:
            raise StorageError(f"Object already exists: {bucket}/{path}")
        self._objects[(bucket, path)] = (content, content_type)
        return StoredObject(bucket=bucket, path=path, public_url=self.public_url(bucket, path))

    def public_url(self, bucket: str, path: str) -> str:
        """Mirror the Supabase public URL layout."""
        return f"{self.BASE_URL}/object/public/{bucket}/{path}"

    def delete_object(self, bucket: str, path: str) -> None:
        """Delete the in-memory object."""
        if bucket in self._failing_deletes:
            raise StorageError(f"Simulated delete failure for bucket {bucket}")
        self._objects.pop((bucket, path), None)

    # Test helper methods

    def fail_uploads_to(self, bucket: str) -> None:
        """Make every upload to bucket raise StorageError (test helper)."""
        self._failing_uploads.add(bucket)

    def fail_deletes_from(self, bucket: str) -> None:
        """Make every delete from bucket raise StorageError (test helper)."""
        self._failing_deletes.add(bucket)

    def get_object(self, bucket: str, path: str) -> bytes | None:
        """Get object content directly (test helper)."""
        entry = self._objects.get((bucket, path))
        return entry[0] if entry else None

    def list_objects(self, bucket: str) -> list[str]:
        """List object paths stored in bucket (test helper)."""
        return sorted(path for (b, path) in self._objects if b == bucket)

    def clear(self) -> None:
        """Clear all stored objects and failure switches (test helper)."""
        self._objects.clear()
        self._failing_uploads.clear()
        self._failing_deletes.clear()


def get_storage_client() -> StorageClientBase:
    """Get the configured storage client.

    Returns:
        StorageClient if SUPABASE_URL and SUPABASE_SERVICE_KEY are set,
        FakeStorageClient otherwise.
    """
    settings = get_settings()

    if settings.storage_configured:
        return StorageClient(
            supabase_url=settings.supabase_url,  # type: ignore[arg-type]
            service_key=settings.supabase_service_key,  # type: ignore[arg-type]
        )

    logger.warning("Supabase Storage not configured; using in-memory storage")
    return FakeStorageClient()
