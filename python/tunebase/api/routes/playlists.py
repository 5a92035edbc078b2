"""Playlist routes.

Routes are transport-only; ownership is checked in the playlist service.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tunebase.api.deps import get_db
from tunebase.auth.middleware import Viewer, get_viewer
from tunebase.responses import success_response
from tunebase.schemas.playlist import AddPlaylistSongRequest, CreatePlaylistRequest
from tunebase.services import playlists as playlists_service

router = APIRouter()


@router.get("/playlists")
def list_playlists(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """List the viewer's playlists, newest first."""
    result = playlists_service.list_playlists(db, viewer.user_id)
    return success_response(data=[p.model_dump(mode="json") for p in result])


@router.post("/playlists")
def create_playlist(
    body: CreatePlaylistRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Create a playlist owned by the viewer."""
    result = playlists_service.create_playlist(db, viewer.user_id, body.name, body.description)
    return success_response(playlist=result.model_dump(mode="json"))


@router.get("/playlists/{playlist_id}")
def get_playlist(
    playlist_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Get a playlist and its songs in order. Owner or admin only."""
    result = playlists_service.get_playlist(db, viewer, playlist_id)
    return success_response(data=result.model_dump(mode="json"))


@router.post("/playlists/{playlist_id}/songs")
def add_playlist_song(
    playlist_id: UUID,
    body: AddPlaylistSongRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Append a song to the end of one of the viewer's playlists."""
    result = playlists_service.add_song_to_playlist(db, viewer, playlist_id, body.song_id)
    return success_response(data=result.model_dump(mode="json"))
