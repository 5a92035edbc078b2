"""Current user endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tunebase.api.deps import get_db
from tunebase.auth.middleware import Viewer, get_viewer
from tunebase.responses import success_response
from tunebase.services import users as users_service

router = APIRouter()


@router.get("/me")
def get_me(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Get the authenticated viewer's profile, including their role."""
    result = users_service.get_profile(db, viewer.user_id)
    return success_response(data=result.model_dump(mode="json"))
