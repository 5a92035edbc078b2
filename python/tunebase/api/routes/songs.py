"""Song routes: public catalogue listing and multipart upload.

Routes are transport-only:
- Extract the viewer from request.state
- Call exactly one service function
- Return success_response(...) or raise ApiError
"""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from tunebase.api.deps import get_db, get_storage_client
from tunebase.auth.middleware import Viewer, get_viewer
from tunebase.responses import success_response
from tunebase.services import songs as songs_service
from tunebase.storage import StorageClientBase

router = APIRouter()


@router.get("/songs")
def list_songs(
    db: Annotated[Session, Depends(get_db)],
    limit: Annotated[int, Query(description="Maximum results (clamped to 1-200)")] = 100,
) -> dict:
    """List songs, newest first. Public: guests may browse."""
    result = songs_service.list_songs(db, limit=limit)
    return success_response(data=[s.model_dump(mode="json") for s in result])


@router.post("/upload")
async def upload_song(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    storage: Annotated[StorageClientBase, Depends(get_storage_client)],
    title: Annotated[str | None, Form()] = None,
    artist: Annotated[str | None, Form()] = None,
    album: Annotated[str | None, Form()] = None,
    audio_file: Annotated[UploadFile | None, File(alias="audioFile")] = None,
    cover_art: Annotated[UploadFile | None, File(alias="coverArt")] = None,
) -> dict:
    """Upload a song (multipart: title, artist, album, audioFile, coverArt).

    Audio is required; cover art is optional and its storage failure does
    not fail the upload.
    """
    audio = await songs_service.read_audio_upload(audio_file)
    cover = await songs_service.read_cover_upload(cover_art)
    song = await run_in_threadpool(
        songs_service.upload_song,
        db,
        storage,
        viewer.user_id,
        title=title,
        artist=artist,
        album=album,
        audio=audio,
        cover=cover,
    )
    return success_response(song=song.model_dump(mode="json"))
