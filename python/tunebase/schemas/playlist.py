"""Playlist-related Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from tunebase.schemas.song import SongOut

__all__ = [
    "CreatePlaylistRequest",
    "AddPlaylistSongRequest",
    "PlaylistOut",
    "PlaylistSongOut",
    "PlaylistDetailOut",
]

# =============================================================================
# Request Schemas
# =============================================================================


class CreatePlaylistRequest(BaseModel):
    """Request body for creating a playlist.

    name is validated by the service (trimmed, 1-100 chars) so that an
    invalid name maps to E_NAME_INVALID rather than a generic 400.
    """

    name: str | None = None
    description: str | None = None


class AddPlaylistSongRequest(BaseModel):
    """Request body for appending a song to a playlist."""

    song_id: UUID = Field(..., alias="songId", description="ID of the song to append")

    model_config = ConfigDict(populate_by_name=True)


# =============================================================================
# Response Schemas
# =============================================================================


class PlaylistOut(BaseModel):
    """Response schema for a playlist."""

    id: UUID
    name: str
    description: str | None
    cover_art_path: str | None
    created_by: UUID
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PlaylistSongOut(BaseModel):
    """Response schema for a playlist membership row."""

    id: UUID
    playlist_id: UUID
    song_id: UUID
    position: int
    added_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PlaylistDetailOut(PlaylistOut):
    """Playlist with its songs in position order."""

    songs: list[SongOut] = []
