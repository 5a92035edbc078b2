"""Storage object naming utilities.

This module is the single point of logic for building object paths and for
mapping stored public URLs back to object paths.

Path Invariant:
    - Production: {epoch_ms}-{random8}-{sanitized filename}
    - Test: test_runs/{run_id}/{epoch_ms}-{random8}-{sanitized filename}

Rules:
    - No leading slash
    - No user identifiers in paths
    - Prefix applied exactly once in build_object_path()
"""

import os
import re
import secrets
import time

# Environment variable for test run prefix
TEST_PREFIX_ENV_VAR = "STORAGE_TEST_PREFIX"

DEFAULT_FILENAME = "upload"


def _get_test_prefix() -> str:
    """Get the test prefix from environment.

    Returns:
        Empty string in production, "test_runs/{run_id}/" in test.
    """
    prefix = os.environ.get(TEST_PREFIX_ENV_VAR, "")
    if prefix and not prefix.endswith("/"):
        prefix = f"{prefix}/"
    return prefix


def sanitize_filename(name: str | None) -> str:
    """Reduce a client-supplied filename to letters, digits, dot, dash and underscore."""
    name = (name or "").strip().replace("\\", "_").replace("/", "_")
    name = re.sub(r"[^A-Za-z0-9._-]+", "_", name).strip("._")
    return name or DEFAULT_FILENAME


def build_object_path(filename: str | None, *, now_ms: int | None = None) -> str:
    """Build the object path for an uploaded file.

    The millisecond timestamp keeps objects roughly time-ordered; the random
    component keeps two same-named uploads in the same millisecond apart.

    Args:
        filename: Original client filename.
        now_ms: Override for the epoch-millisecond component.

    Returns:
        Object path, e.g. "1718000000000-a1b2c3d4-track.mp3".
    """
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    prefix = _get_test_prefix()
    return f"{prefix}{now_ms}-{secrets.token_hex(4)}-{sanitize_filename(filename)}"


def object_path_from_public_url(url: str | None, bucket: str) -> str | None:
    """Recover the object path from a stored public URL.

    Args:
        url: Public URL as stored on a song row.
        bucket: The bucket the URL is expected to point into.

    Returns:
        The object path, or None if the URL is empty or not a public URL
        for this bucket.
    """
    if not url:
        return None

    marker = f"/object/public/{bucket}/"
    _, found, path = url.partition(marker)
    if not found:
        return None

    path = path.split("?", 1)[0]
    return path or None
