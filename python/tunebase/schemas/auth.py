"""Sign-up / sign-in schemas."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

__all__ = ["SignupRequest", "LoginRequest", "SessionOut"]


class SignupRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1)
    display_name: str | None = Field(default=None, alias="displayName", max_length=100)

    model_config = ConfigDict(populate_by_name=True)


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1)


class SessionOut(BaseModel):
    """Session handed back to the client after sign-up or sign-in.

    access_token is None when the identity provider requires email
    confirmation before the first sign-in.
    """

    user_id: UUID
    access_token: str | None
    refresh_token: str | None
    token_type: str
    expires_in: int | None
