"""Favorite and play-history schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

__all__ = ["SongRefRequest", "FavoriteOut"]


class SongRefRequest(BaseModel):
    """Request body naming a single song ({"songId": ...})."""

    song_id: UUID = Field(..., alias="songId")

    model_config = ConfigDict(populate_by_name=True)


class FavoriteOut(BaseModel):
    """Response schema for a favorite marker."""

    id: UUID
    user_id: UUID
    song_id: UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
