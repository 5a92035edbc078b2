"""Song-related Pydantic schemas.

Contains response models for song endpoints. Uploads arrive as multipart
form fields and are parsed in the route, so there is no request model.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

__all__ = ["SongOut", "AdminSongOut"]


class SongOut(BaseModel):
    """Response schema for a song.

    file_path and cover_art_path are public object-storage URLs.
    """

    id: UUID
    title: str
    artist: str | None
    album: str | None
    duration: int | None
    file_path: str
    cover_art_path: str | None
    uploaded_by: UUID
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AdminSongOut(SongOut):
    """Song as listed in the admin console, with the uploader's display name."""

    uploader_display_name: str | None = None
