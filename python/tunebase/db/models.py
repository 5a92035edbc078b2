"""SQLAlchemy ORM models for Tunebase.

Defines all database tables using SQLAlchemy 2.x declarative patterns.
Column types are the dialect-neutral ones (Uuid, DateTime) so the same
metadata backs PostgreSQL in production and SQLite in unit tests.
"""

from datetime import UTC, datetime
from enum import Enum as PyEnum
from uuid import UUID, uuid4

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    Text,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def utcnow() -> datetime:
    """Timezone-aware current time used for column defaults."""
    return datetime.now(UTC)


# =============================================================================
# Enums
# =============================================================================


class UserRole(str, PyEnum):
    """Roles a user profile can hold.

    Stored as lowercase text with a CHECK constraint, not a native enum.
    """

    user = "user"
    admin = "admin"


# =============================================================================
# Models
# =============================================================================


class UserProfile(Base):
    """Application profile for an identity-provider user.

    The profile ID matches the Supabase auth user ID (sub claim).
    Exactly one profile exists per identity.
    """

    __tablename__ = "user_profiles"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    role: Mapped[str] = mapped_column(
        Text, nullable=False, default=UserRole.user.value, server_default=UserRole.user.value
    )
    display_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    # Relationships
    songs: Mapped[list["Song"]] = relationship("Song", back_populates="uploader")
    playlists: Mapped[list["Playlist"]] = relationship(
        "Playlist", back_populates="owner", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint("role IN ('user', 'admin')", name="ck_user_profiles_role"),
    )


class Song(Base):
    """Uploaded song.

    file_path and cover_art_path hold the public object-storage URLs of the
    audio and cover art blobs.
    """

    __tablename__ = "songs"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    artist: Mapped[str | None] = mapped_column(Text, nullable=True)
    album: Mapped[str | None] = mapped_column(Text, nullable=True)
    duration: Mapped[int | None] = mapped_column(Integer, nullable=True)
    file_path: Mapped[str] = mapped_column(Text, nullable=False)
    cover_art_path: Mapped[str | None] = mapped_column(Text, nullable=True)
    uploaded_by: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("user_profiles.id"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    # Relationships
    uploader: Mapped["UserProfile"] = relationship("UserProfile", back_populates="songs")


class Playlist(Base):
    """User-owned playlist. Only the owner (created_by) mutates membership."""

    __tablename__ = "playlists"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    cover_art_path: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("user_profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    # Relationships
    owner: Mapped["UserProfile"] = relationship("UserProfile", back_populates="playlists")


class PlaylistSong(Base):
    """Playlist membership row.

    Positions are append-only: max(position) + 1 within the playlist,
    starting at 0. Gaps left by deletions are never re-balanced.
    """

    __tablename__ = "playlist_songs"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    playlist_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("playlists.id", ondelete="CASCADE"), nullable=False, index=True
    )
    song_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("songs.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    added_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )

    # Relationships
    song: Mapped["Song"] = relationship("Song")

    __table_args__ = (
        UniqueConstraint("playlist_id", "position", name="uq_playlist_songs_position"),
        CheckConstraint("position >= 0", name="ck_playlist_songs_position"),
    )


class UserFavorite(Base):
    """Favorite marker, unique per (user, song)."""

    __tablename__ = "user_favorites"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("user_profiles.id", ondelete="CASCADE"), nullable=False
    )
    song_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("songs.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )

    # Relationships
    song: Mapped["Song"] = relationship("Song")

    __table_args__ = (UniqueConstraint("user_id", "song_id", name="uq_user_favorites_user_song"),)


class PlayHistory(Base):
    """Append-only play log."""

    __tablename__ = "play_history"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("user_profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    song_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("songs.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
