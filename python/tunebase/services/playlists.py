"""Playlist service layer.

Playlists are owned by their creator; only the owner may change membership.
Playlists the viewer may not see are reported as not found so that their
existence does not leak.

Appending a song assigns position = max(position) + 1 (0 for an empty
playlist). The playlist row is locked for the duration of the append, so
appends to one playlist are serialized; UNIQUE(playlist_id, position) is
the backstop.
"""

import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tunebase.auth.middleware import Viewer
from tunebase.auth.permissions import AccessDecision, evaluate_access
from tunebase.db.models import Playlist, PlaylistSong, Song
from tunebase.db.session import transaction
from tunebase.errors import ApiErrorCode, ConflictError, InvalidRequestError, NotFoundError
from tunebase.schemas.playlist import PlaylistDetailOut, PlaylistOut, PlaylistSongOut
from tunebase.schemas.song import SongOut

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 100


def _playlist_not_found() -> NotFoundError:
    return NotFoundError(ApiErrorCode.E_PLAYLIST_NOT_FOUND, "Playlist not found")


def create_playlist(
    db: Session, viewer_id: UUID, name: str | None, description: str | None = None
) -> PlaylistOut:
    """Create a playlist owned by the viewer.

    Raises:
        InvalidRequestError: If name is empty or > 100 chars.
    """
    name = (name or "").strip()
    if not name or len(name) > MAX_NAME_LENGTH:
        raise InvalidRequestError(ApiErrorCode.E_NAME_INVALID, "Name must be 1-100 characters")

    playlist = Playlist(name=name, description=(description or "").strip() or None, created_by=viewer_id)
    with transaction(db):
        db.add(playlist)

    logger.info("Playlist %s created by %s", playlist.id, viewer_id)
    return PlaylistOut.model_validate(playlist)


def list_playlists(db: Session, viewer_id: UUID) -> list[PlaylistOut]:
    """List the viewer's playlists, newest first."""
    playlists = db.scalars(
        select(Playlist)
        .where(Playlist.created_by == viewer_id)
        .order_by(Playlist.created_at.desc(), Playlist.id)
    )
    return [PlaylistOut.model_validate(p) for p in playlists]


def get_playlist(db: Session, viewer: Viewer, playlist_id: UUID) -> PlaylistDetailOut:
    """Get a playlist with its songs in position order.

    Visible to the owner and to admins.

    Raises:
        NotFoundError: If the playlist does not exist or is not visible.
    """
    playlist = db.get(Playlist, playlist_id)
    if playlist is None:
        raise _playlist_not_found()
    if evaluate_access(viewer, owner_id=playlist.created_by) is not AccessDecision.OK:
        raise _playlist_not_found()

    songs = db.scalars(
        select(Song)
        .join(PlaylistSong, PlaylistSong.song_id == Song.id)
        .where(PlaylistSong.playlist_id == playlist_id)
        .order_by(PlaylistSong.position)
    )
    detail = PlaylistDetailOut.model_validate(playlist)
    detail.songs = [SongOut.model_validate(s) for s in songs]
    return detail


def add_song_to_playlist(
    db: Session, viewer: Viewer, playlist_id: UUID, song_id: UUID
) -> PlaylistSongOut:
    """Append a song to the end of a playlist the viewer owns.

    Raises:
        NotFoundError: Playlist missing or not owned (E_PLAYLIST_NOT_FOUND),
            or song missing (E_SONG_NOT_FOUND).
        ConflictError: Position collision under a concurrent append.
    """
    try:
        with transaction(db):
            playlist = db.scalars(
                select(Playlist).where(Playlist.id == playlist_id).with_for_update()
            ).first()
            if playlist is None:
                raise _playlist_not_found()
            # Membership is owner-only; admins do not edit other users' playlists
            decision = evaluate_access(viewer, owner_id=playlist.created_by, admin_override=False)
            if decision is not AccessDecision.OK:
                raise _playlist_not_found()

            if db.get(Song, song_id) is None:
                raise NotFoundError(ApiErrorCode.E_SONG_NOT_FOUND, "Song not found")

            next_position = db.scalar(
                select(func.coalesce(func.max(PlaylistSong.position), -1) + 1).where(
                    PlaylistSong.playlist_id == playlist_id
                )
            )
            entry = PlaylistSong(playlist_id=playlist_id, song_id=song_id, position=next_position)
            db.add(entry)
    except IntegrityError as e:
        logger.warning("Position conflict appending to playlist %s: %s", playlist_id, e)
        raise ConflictError(ApiErrorCode.E_CONFLICT, "Playlist was modified concurrently") from e

    return PlaylistSongOut.model_validate(entry)
