"""Pydantic schemas for request/response models.

All schemas are re-exported here for convenient imports.
"""

from tunebase.schemas.auth import LoginRequest, SessionOut, SignupRequest
from tunebase.schemas.favorite import FavoriteOut, SongRefRequest
from tunebase.schemas.playlist import (
    AddPlaylistSongRequest,
    CreatePlaylistRequest,
    PlaylistDetailOut,
    PlaylistOut,
    PlaylistSongOut,
)
from tunebase.schemas.song import AdminSongOut, SongOut
from tunebase.schemas.user import UpdateRoleRequest, UserProfileOut

__all__ = [
    # Auth
    "LoginRequest",
    "SessionOut",
    "SignupRequest",
    # Favorites / plays
    "FavoriteOut",
    "SongRefRequest",
    # Playlists
    "AddPlaylistSongRequest",
    "CreatePlaylistRequest",
    "PlaylistDetailOut",
    "PlaylistOut",
    "PlaylistSongOut",
    # Songs
    "AdminSongOut",
    "SongOut",
    # Users
    "UpdateRoleRequest",
    "UserProfileOut",
]
