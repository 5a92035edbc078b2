"""Song service layer.

Upload, listing and admin deletion of songs.

Upload is a saga over two stores that share no transaction:
1. audio blob -> songs bucket (hard dependency, failure aborts)
2. cover blob -> covers bucket (soft dependency, failure is logged and the
   song is saved without cover art)
3. song row insert; on failure the blobs stored in 1-2 are deleted again

Deletion runs the other way: audio blob, cover blob, then the row. Blob
deletion failures leave an orphaned object that is logged by path; they
never keep the row alive.
"""

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tunebase.config import get_settings
from tunebase.db.models import Song, UserProfile
from tunebase.db.session import transaction
from tunebase.errors import ApiError, ApiErrorCode, InvalidRequestError
from tunebase.schemas.song import AdminSongOut, SongOut
from tunebase.storage import (
    StorageClientBase,
    StorageError,
    StoredObject,
    build_object_path,
    object_path_from_public_url,
)

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 100
MAX_LIST_LIMIT = 200

# Some browsers send a generic type for less common audio containers
GENERIC_AUDIO_TYPES = {"application/octet-stream"}


@dataclass(frozen=True)
class UploadedFile:
    """A file taken from a multipart submission."""

    filename: str | None
    content_type: str | None
    content: bytes


async def _read_bounded(upload, limit: int, label: str) -> UploadedFile | None:
    """Read a multipart file without buffering more than limit + 1 bytes.

    Raises:
        InvalidRequestError: The declared or actual size exceeds the limit.
    """
    if upload is None:
        return None

    too_large = InvalidRequestError(
        ApiErrorCode.E_FILE_TOO_LARGE, f"{label} exceeds maximum {limit} bytes"
    )
    if upload.size is not None and upload.size > limit:
        raise too_large
    content = await upload.read(limit + 1)
    if len(content) > limit:
        raise too_large
    return UploadedFile(filename=upload.filename, content_type=upload.content_type, content=content)


async def read_audio_upload(upload) -> UploadedFile | None:
    return await _read_bounded(upload, get_settings().max_audio_bytes, "Audio file")


async def read_cover_upload(upload) -> UploadedFile | None:
    return await _read_bounded(upload, get_settings().max_cover_bytes, "Cover art")


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _media_type(content_type: str | None) -> str:
    return (content_type or "").split(";", 1)[0].strip().lower()


def _validate_upload(title: str | None, audio: UploadedFile | None, cover: UploadedFile | None) -> str:
    """Validate an upload before anything is stored.

    Returns:
        The trimmed title.

    Raises:
        InvalidRequestError: On a missing field, wrong file type or oversize file.
    """
    settings = get_settings()

    title = _blank_to_none(title)
    if title is None:
        raise InvalidRequestError(ApiErrorCode.E_INVALID_REQUEST, "Title is required")
    if audio is None or not audio.content:
        raise InvalidRequestError(ApiErrorCode.E_INVALID_REQUEST, "Audio file is required")

    audio_type = _media_type(audio.content_type)
    if not (audio_type.startswith("audio/") or audio_type in GENERIC_AUDIO_TYPES):
        raise InvalidRequestError(
            ApiErrorCode.E_INVALID_FILE_TYPE,
            f"Invalid audio content type '{audio.content_type}'",
        )
    if len(audio.content) > settings.max_audio_bytes:
        raise InvalidRequestError(
            ApiErrorCode.E_FILE_TOO_LARGE,
            f"Audio file exceeds maximum {settings.max_audio_bytes} bytes",
        )

    if cover is not None:
        if not _media_type(cover.content_type).startswith("image/"):
            raise InvalidRequestError(
                ApiErrorCode.E_INVALID_FILE_TYPE,
                f"Invalid cover art content type '{cover.content_type}'",
            )
        if len(cover.content) > settings.max_cover_bytes:
            raise InvalidRequestError(
                ApiErrorCode.E_FILE_TOO_LARGE,
                f"Cover art exceeds maximum {settings.max_cover_bytes} bytes",
            )

    return title


def _discard_objects(storage: StorageClientBase, objects: list[StoredObject]) -> None:
    """Delete blobs whose song row was never written."""
    for obj in objects:
        try:
            storage.delete_object(obj.bucket, obj.path)
        except StorageError as e:
            logger.error("Orphaned object %s/%s after failed upload: %s", obj.bucket, obj.path, e)


def upload_song(
    db: Session,
    storage: StorageClientBase,
    viewer_id: UUID,
    *,
    title: str | None,
    artist: str | None = None,
    album: str | None = None,
    audio: UploadedFile | None,
    cover: UploadedFile | None = None,
) -> SongOut:
    """Store an uploaded song and its optional cover art.

    Args:
        db: Database session.
        storage: Object storage client.
        viewer_id: The uploader.
        title: Required song title.
        artist: Optional artist (blank stored as null).
        album: Optional album (blank stored as null).
        audio: Required audio file.
        cover: Optional cover image; an empty file is treated as absent.

    Returns:
        The created song.

    Raises:
        InvalidRequestError: Validation failure, nothing stored.
        ApiError(E_STORAGE_ERROR): Audio could not be stored.
        ApiError(E_INTERNAL): Song row could not be written (blobs discarded).
    """
    if cover is not None and not cover.content:
        cover = None
    title = _validate_upload(title, audio, cover)
    assert audio is not None

    settings = get_settings()
    stored: list[StoredObject] = []

    try:
        audio_obj = storage.upload_object(
            settings.songs_bucket,
            build_object_path(audio.filename),
            audio.content,
            content_type=_media_type(audio.content_type) or "application/octet-stream",
        )
    except StorageError as e:
        logger.error("Audio upload failed for user %s: %s", viewer_id, e)
        raise ApiError(ApiErrorCode.E_STORAGE_ERROR, "Failed to store audio file") from e
    stored.append(audio_obj)

    cover_url = None
    if cover is not None:
        try:
            cover_obj = storage.upload_object(
                settings.covers_bucket,
                build_object_path(cover.filename),
                cover.content,
                content_type=_media_type(cover.content_type),
            )
        except StorageError as e:
            logger.warning("Cover art upload failed for user %s, saving without cover: %s", viewer_id, e)
        else:
            stored.append(cover_obj)
            cover_url = cover_obj.public_url

    song = Song(
        title=title,
        artist=_blank_to_none(artist),
        album=_blank_to_none(album),
        file_path=audio_obj.public_url,
        cover_art_path=cover_url,
        uploaded_by=viewer_id,
    )
    try:
        with transaction(db):
            db.add(song)
    except SQLAlchemyError as e:
        logger.error("Song insert failed for user %s, discarding %d blobs: %s", viewer_id, len(stored), e)
        _discard_objects(storage, stored)
        raise ApiError(ApiErrorCode.E_INTERNAL, "Failed to save song") from e

    logger.info("Song %s uploaded by %s", song.id, viewer_id)
    return SongOut.model_validate(song)


def list_songs(db: Session, limit: int = DEFAULT_LIST_LIMIT) -> list[SongOut]:
    """List songs, newest first.

    limit is clamped to [1, 200].
    """
    limit = max(1, min(limit, MAX_LIST_LIMIT))
    songs = db.scalars(select(Song).order_by(Song.created_at.desc(), Song.id).limit(limit))
    return [SongOut.model_validate(song) for song in songs]


def list_songs_for_admin(db: Session) -> list[AdminSongOut]:
    """List every song with the uploader's display name, newest first."""
    rows = db.execute(
        select(Song, UserProfile.display_name)
        .join(UserProfile, UserProfile.id == Song.uploaded_by)
        .order_by(Song.created_at.desc(), Song.id)
    ).all()
    return [
        AdminSongOut.model_validate(song).model_copy(update={"uploader_display_name": name})
        for song, name in rows
    ]


def _delete_blob(storage: StorageClientBase, bucket: str, url: str | None, song_id: UUID) -> None:
    path = object_path_from_public_url(url, bucket)
    if path is None:
        if url:
            logger.warning("Song %s has unrecognised %s URL %s; blob left in place", song_id, bucket, url)
        return
    try:
        storage.delete_object(bucket, path)
    except StorageError as e:
        logger.error("Orphaned object %s/%s while deleting song %s: %s", bucket, path, song_id, e)


def delete_song(db: Session, storage: StorageClientBase, song_id: UUID) -> None:
    """Delete a song's blobs and then its row.

    Deleting a song that does not exist is a no-op. Playlist memberships,
    favorites and play history go with the row (FK cascade).
    """
    settings = get_settings()

    song = db.get(Song, song_id)
    if song is None:
        logger.info("Song %s already deleted", song_id)
        return

    _delete_blob(storage, settings.songs_bucket, song.file_path, song_id)
    _delete_blob(storage, settings.covers_bucket, song.cover_art_path, song_id)

    with transaction(db):
        db.execute(delete(Song).where(Song.id == song_id))

    logger.info("Song %s deleted", song_id)
