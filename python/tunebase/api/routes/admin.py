"""Admin routes.

Every route here depends on require_admin, so a non-admin viewer gets 403
before any handler code runs.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tunebase.api.deps import get_db, get_storage_client
from tunebase.auth.middleware import Viewer
from tunebase.auth.permissions import require_admin
from tunebase.responses import success_response
from tunebase.schemas.user import UpdateRoleRequest
from tunebase.services import songs as songs_service
from tunebase.services import users as users_service
from tunebase.storage import StorageClientBase

router = APIRouter(prefix="/admin")


@router.get("/songs")
def list_songs(
    viewer: Annotated[Viewer, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """List every song with its uploader's display name."""
    result = songs_service.list_songs_for_admin(db)
    return success_response(data=[s.model_dump(mode="json") for s in result])


@router.delete("/songs/{song_id}")
def delete_song(
    song_id: UUID,
    viewer: Annotated[Viewer, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
    storage: Annotated[StorageClientBase, Depends(get_storage_client)],
) -> dict:
    """Delete a song, its audio and cover blobs.

    Idempotent: deleting a missing song succeeds.
    """
    songs_service.delete_song(db, storage, song_id)
    return success_response()


@router.get("/users")
def list_users(
    viewer: Annotated[Viewer, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """List all user profiles."""
    result = users_service.list_users(db)
    return success_response(data=[u.model_dump(mode="json") for u in result])


@router.patch("/users/{user_id}/role")
def change_user_role(
    user_id: UUID,
    body: UpdateRoleRequest,
    viewer: Annotated[Viewer, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Set a user's role to "user" or "admin".

    Demoting the last remaining admin is refused.
    """
    result = users_service.change_role(db, viewer.user_id, user_id, body.role)
    return success_response(data=result.model_dump(mode="json"))
