"""Database module for Tunebase.

Provides engine creation, session management, transaction helpers, and ORM models.
"""

from tunebase.db.engine import create_db_engine, get_engine
from tunebase.db.models import (
    Base,
    Playlist,
    PlaylistSong,
    PlayHistory,
    Song,
    UserFavorite,
    UserProfile,
    UserRole,
)
from tunebase.db.session import create_session_factory, get_db, get_session_factory, transaction

__all__ = [
    # Engine and session
    "create_db_engine",
    "get_engine",
    "create_session_factory",
    "get_session_factory",
    "get_db",
    "transaction",
    # Base
    "Base",
    # Enums
    "UserRole",
    # Models
    "UserProfile",
    "Song",
    "Playlist",
    "PlaylistSong",
    "UserFavorite",
    "PlayHistory",
]
