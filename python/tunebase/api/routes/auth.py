"""Sign-up, sign-in and sign-out routes.

/auth/signup and /auth/login are public; /auth/logout needs the bearer
token being revoked.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tunebase.api.deps import get_db, get_identity_client
from tunebase.auth.identity import IdentityClientBase
from tunebase.auth.middleware import get_access_token
from tunebase.responses import success_response
from tunebase.schemas.auth import LoginRequest, SignupRequest
from tunebase.services import auth as auth_service

router = APIRouter(prefix="/auth")


@router.post("/signup")
def signup(
    body: SignupRequest,
    db: Annotated[Session, Depends(get_db)],
    identity: Annotated[IdentityClientBase, Depends(get_identity_client)],
) -> dict:
    """Create an account. New accounts always start with the "user" role."""
    session = auth_service.sign_up(db, identity, body.email, body.password, body.display_name)
    return success_response(session=session.model_dump(mode="json"))


@router.post("/login")
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
    identity: Annotated[IdentityClientBase, Depends(get_identity_client)],
) -> dict:
    session = auth_service.sign_in(db, identity, body.email, body.password)
    return success_response(session=session.model_dump(mode="json"))


@router.post("/logout")
def logout(
    access_token: Annotated[str, Depends(get_access_token)],
    identity: Annotated[IdentityClientBase, Depends(get_identity_client)],
) -> dict:
    auth_service.sign_out(identity, access_token)
    return success_response()
