"""Initial schema - user_profiles, songs, playlists, playlist_songs, user_favorites, play_history

Revision ID: 0001
Revises:
Create Date: 2026-10-17

Profile ids are the identity provider's user ids, so user_profiles.id has
no server default. Every other table generates its own UUIDs.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.TIMESTAMP(timezone=True),
        server_default=sa.text("now()"),
        nullable=False,
    )


def _uuid_pk() -> sa.Column:
    return sa.Column(
        "id",
        sa.UUID(),
        server_default=sa.text("gen_random_uuid()"),
        nullable=False,
    )


def upgrade() -> None:
    # Enable pgcrypto extension for gen_random_uuid()
    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto")

    # ==========================================================================
    # user_profiles table
    # ==========================================================================
    op.create_table(
        "user_profiles",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("role", sa.Text(), server_default="user", nullable=False),
        sa.Column("display_name", sa.Text(), nullable=True),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("role IN ('user', 'admin')", name="ck_user_profiles_role"),
    )

    # ==========================================================================
    # songs table
    # ==========================================================================
    op.create_table(
        "songs",
        _uuid_pk(),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("artist", sa.Text(), nullable=True),
        sa.Column("album", sa.Text(), nullable=True),
        sa.Column("duration", sa.Integer(), nullable=True),
        sa.Column("file_path", sa.Text(), nullable=False),
        sa.Column("cover_art_path", sa.Text(), nullable=True),
        sa.Column("uploaded_by", sa.UUID(), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["uploaded_by"], ["user_profiles.id"]),
    )
    op.create_index("ix_songs_uploaded_by", "songs", ["uploaded_by"])
    op.create_index("ix_songs_created_at", "songs", [sa.text("created_at DESC")])

    # ==========================================================================
    # playlists table
    # ==========================================================================
    op.create_table(
        "playlists",
        _uuid_pk(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("cover_art_path", sa.Text(), nullable=True),
        sa.Column("created_by", sa.UUID(), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["created_by"], ["user_profiles.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_playlists_created_by", "playlists", ["created_by"])

    # ==========================================================================
    # playlist_songs table
    # ==========================================================================
    op.create_table(
        "playlist_songs",
        _uuid_pk(),
        sa.Column("playlist_id", sa.UUID(), nullable=False),
        sa.Column("song_id", sa.UUID(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        _timestamp("added_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["playlist_id"], ["playlists.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["song_id"], ["songs.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("playlist_id", "position", name="uq_playlist_songs_position"),
        sa.CheckConstraint("position >= 0", name="ck_playlist_songs_position"),
    )
    op.create_index("ix_playlist_songs_playlist_id", "playlist_songs", ["playlist_id"])

    # ==========================================================================
    # user_favorites table
    # ==========================================================================
    op.create_table(
        "user_favorites",
        _uuid_pk(),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("song_id", sa.UUID(), nullable=False),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["user_profiles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["song_id"], ["songs.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("user_id", "song_id", name="uq_user_favorites_user_song"),
    )

    # ==========================================================================
    # play_history table
    # ==========================================================================
    op.create_table(
        "play_history",
        _uuid_pk(),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("song_id", sa.UUID(), nullable=False),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["user_profiles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["song_id"], ["songs.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_play_history_user_id", "play_history", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_play_history_user_id", table_name="play_history")
    op.drop_table("play_history")
    op.drop_table("user_favorites")
    op.drop_index("ix_playlist_songs_playlist_id", table_name="playlist_songs")
    op.drop_table("playlist_songs")
    op.drop_index("ix_playlists_created_by", table_name="playlists")
    op.drop_table("playlists")
    op.drop_index("ix_songs_created_at", table_name="songs")
    op.drop_index("ix_songs_uploaded_by", table_name="songs")
    op.drop_table("songs")
    op.drop_table("user_profiles")
