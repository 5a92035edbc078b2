"""Favorites service layer.

A favorite is unique per (user, song). Uniqueness is enforced by the
database; a duplicate insert surfaces as E_FAVORITE_EXISTS.
"""

import logging
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tunebase.db.models import Song, UserFavorite
from tunebase.db.session import transaction
from tunebase.errors import ApiErrorCode, ConflictError, NotFoundError
from tunebase.schemas.favorite import FavoriteOut
from tunebase.schemas.song import SongOut

logger = logging.getLogger(__name__)


def add_favorite(db: Session, viewer_id: UUID, song_id: UUID) -> FavoriteOut:
    """Mark a song as a favorite of the viewer.

    Raises:
        NotFoundError: If the song does not exist.
        ConflictError: If the song is already a favorite.
    """
    if db.get(Song, song_id) is None:
        raise NotFoundError(ApiErrorCode.E_SONG_NOT_FOUND, "Song not found")

    favorite = UserFavorite(user_id=viewer_id, song_id=song_id)
    try:
        with transaction(db):
            db.add(favorite)
    except IntegrityError as e:
        raise ConflictError(ApiErrorCode.E_FAVORITE_EXISTS, "Song is already a favorite") from e

    return FavoriteOut.model_validate(favorite)


def remove_favorite(db: Session, viewer_id: UUID, song_id: UUID) -> None:
    """Remove a favorite. Removing one that does not exist is a no-op."""
    with transaction(db):
        result = db.execute(
            delete(UserFavorite).where(
                UserFavorite.user_id == viewer_id,
                UserFavorite.song_id == song_id,
            )
        )
    if result.rowcount == 0:
        logger.debug("No favorite %s for user %s", song_id, viewer_id)


def list_favorites(db: Session, viewer_id: UUID) -> list[SongOut]:
    """List the viewer's favorite songs, most recently favorited first."""
    songs = db.scalars(
        select(Song)
        .join(UserFavorite, UserFavorite.song_id == Song.id)
        .where(UserFavorite.user_id == viewer_id)
        .order_by(UserFavorite.created_at.desc(), UserFavorite.id)
    )
    return [SongOut.model_validate(song) for song in songs]
