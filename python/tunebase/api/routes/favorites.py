"""Favorite and play-history routes."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tunebase.api.deps import get_db
from tunebase.auth.middleware import Viewer, get_viewer
from tunebase.errors import ApiErrorCode, InvalidRequestError
from tunebase.responses import success_response
from tunebase.schemas.favorite import SongRefRequest
from tunebase.services import favorites as favorites_service
from tunebase.services import plays as plays_service

router = APIRouter()


@router.get("/favorites")
def list_favorites(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """List the viewer's favorite songs."""
    result = favorites_service.list_favorites(db, viewer.user_id)
    return success_response(data=[s.model_dump(mode="json") for s in result])


@router.post("/favorites")
def add_favorite(
    body: SongRefRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Favorite a song. A second favorite of the same song is a 409."""
    result = favorites_service.add_favorite(db, viewer.user_id, body.song_id)
    return success_response(data=result.model_dump(mode="json"))


@router.delete("/favorites")
def remove_favorite(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    song_id: Annotated[UUID | None, Query(alias="songId")] = None,
) -> dict:
    """Un-favorite a song (?songId=...)."""
    if song_id is None:
        raise InvalidRequestError(ApiErrorCode.E_INVALID_REQUEST, "songId is required")
    favorites_service.remove_favorite(db, viewer.user_id, song_id)
    return success_response()


@router.post("/play")
def record_play(
    body: SongRefRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Record that the viewer played a song. Never fails on the insert itself."""
    plays_service.record_play(db, viewer.user_id, body.song_id)
    return success_response()
